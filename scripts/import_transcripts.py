"""Import a transcript spreadsheet from disk into the local database.

Example:
  python scripts/import_transcripts.py grades.xlsx
  python scripts/import_transcripts.py --template template.xlsx
"""

import argparse
import logging
import sys
from pathlib import Path

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.exceptions import AppException
from app.schemas.upload import ImportStatus
from app.services.export import ExportService
from app.services.upload import UploadService

logger = logging.getLogger("import_transcripts")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import students and grades from an Excel file")
    parser.add_argument("file", nargs="?", type=Path, help="Spreadsheet to import (.xlsx)")
    parser.add_argument("--template", type=Path, help="Write the import template to this path and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each skipped row")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    if args.template:
        args.template.write_bytes(ExportService().generate_template())
        logger.info(f"Template written to {args.template}")
        return 0

    if args.file is None:
        parser.error("a spreadsheet file or --template is required")
    if not args.file.is_file():
        parser.error(f"file not found: {args.file}")

    init_db()
    db = SessionLocal()
    try:
        result = UploadService(db).process_transcript_upload(args.file.read_bytes(), args.file.name)
    except AppException as e:
        logger.error(f"{e.code}: {e.message}")
        return 1
    finally:
        db.close()

    print(result.message)
    if result.status == ImportStatus.FAILED:
        return 1
    return 0 if not result.rows_failed else 2


if __name__ == "__main__":
    sys.exit(main())
