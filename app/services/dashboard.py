"""Dashboard service: derived reads over the transcript registry."""

from app.schemas.dashboard import (
    CourseUnitAverage,
    DashboardStats,
    GradeDistribution,
    StudentRanking,
)
from app.schemas.grading import NOT_GRADED, PASS_BANDS
from app.services.grading import pass_level, school_total
from app.services.transcript import TranscriptService

RECENT_STUDENTS_LIMIT = 5


class DashboardService:
    """Dashboard data aggregation service."""

    def __init__(self, registry: TranscriptService):
        self.registry = registry

    def get_dashboard(self, ranking_limit: int = 10) -> DashboardStats:
        """Counts, grade distribution, unit averages and rankings."""
        students = self.registry.students
        transcripts = self.registry.transcripts

        complete = sum(
            1 for t in transcripts if any(u.total is not None for u in t.course_units)
        )

        distribution = GradeDistribution()
        for transcript in transcripts:
            for unit in transcript.course_units:
                if unit.grade in GradeDistribution.model_fields:
                    setattr(distribution, unit.grade, getattr(distribution, unit.grade) + 1)

        recent = sorted(students, key=lambda s: s.admission_number, reverse=True)
        return DashboardStats(
            total_students=len(students),
            complete_transcripts=complete,
            incomplete_transcripts=len(students) - complete,
            grade_distribution=distribution,
            pass_level_counts=self._pass_level_counts(),
            course_unit_averages=self._course_unit_averages(),
            rankings=self.get_rankings()[:ranking_limit],
            recent_students=recent[:RECENT_STUDENTS_LIMIT],
        )

    def get_rankings(self) -> list[StudentRanking]:
        """Students with at least one graded unit, ordered by school total.

        Equal totals share a rank.
        """
        scored = []
        for transcript in self.registry.transcripts:
            if not any(u.total is not None for u in transcript.course_units):
                continue
            total = school_total(transcript.course_units)
            scored.append((transcript, total))
        scored.sort(key=lambda item: item[1], reverse=True)

        rankings = []
        previous_total = None
        rank = 0
        for position, (transcript, total) in enumerate(scored, start=1):
            if total != previous_total:
                rank = position
                previous_total = total
            student = transcript.student
            rankings.append(StudentRanking(
                rank=rank,
                student_id=student.id,
                name=student.name,
                admission_number=student.admission_number,
                school_total=total,
                pass_level=pass_level(total),
            ))
        return rankings

    def _pass_level_counts(self) -> dict[str, int]:
        counts = {band.level: 0 for band in PASS_BANDS}
        counts[NOT_GRADED] = 0
        for transcript in self.registry.transcripts:
            counts[pass_level(school_total(transcript.course_units))] += 1
        return counts

    def _course_unit_averages(self) -> list[CourseUnitAverage]:
        totals: dict[str, list[float]] = {name: [] for name in self.registry.course_units}
        for transcript in self.registry.transcripts:
            for unit in transcript.course_units:
                if unit.total is not None:
                    totals.setdefault(unit.name, []).append(unit.total)

        return [
            CourseUnitAverage(
                name=name,
                graded_count=len(values),
                average_total=round(sum(values) / len(values), 2) if values else None,
            )
            for name, values in totals.items()
        ]
