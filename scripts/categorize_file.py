#!/usr/bin/env python3
"""
Categorize a single file against an exported annotation corpus.

Usage:
    python scripts/categorize_file.py --file invoice.pdf --corpus corpus.json --categories categories.json
    python scripts/categorize_file.py --file scan.png --corpus corpus.json --categories categories.json --json
    python scripts/categorize_file.py --file data.txt --type json --corpus corpus.json --categories categories.json

Requirements:
    - corpus.json: JSON array of annotation records ({dataId, rule: {categoryId}, annotations: [...]})
    - categories.json: JSON array of categories ({id, name})
    - Tesseract installed for image OCR
"""

import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocat.config import get
from autocat.corpus import CategoryDirectory, JsonFileCorpusReader
from autocat.engine import CategorizationEngine
from autocat.exceptions import CategorizationError
from autocat.extraction import LocalContentExtractionService
from autocat.logging_config import configure_logging
from autocat.models import FileType
from autocat.service import CategorizationService
from autocat.settings import load_settings


def print_result(result) -> None:
    print(f"\n{'='*50}")
    print(f"Category:   {result.category}")
    print(f"Confidence: {result.confidence:.2f}")
    print(f"Folder:     {result.dest_path}")
    print(f"Matches:    {len(result.matches)}")
    print(f"{'='*50}")
    for match in result.matches:
        location = ""
        if match.page_number is not None:
            location = f" (page {match.page_number})"
        elif match.start_time is not None:
            location = f" ({match.start_time:.1f}s)"
        print(
            f"  [{match.confidence:.2f}] {match.category:<20} {match.match_type.value:<14} "
            f"{match.text}{location}"
        )
    for error in result.raw.get("errors", []):
        print(f"  warning: {error}")


def main():
    parser = argparse.ArgumentParser(description="Categorize a file against an annotation corpus")
    parser.add_argument("--file", type=Path, required=True, help="File to categorize")
    parser.add_argument("--corpus", type=Path, required=True, help="Annotation corpus JSON file")
    parser.add_argument("--categories", type=Path, required=True, help="Category list JSON file")
    parser.add_argument(
        "--type",
        choices=[t.value for t in FileType],
        help="File type (detected from the extension when omitted)",
    )
    parser.add_argument("--no-ocr", action="store_true", help="Skip OCR on images")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--log-level", default=get("app", "log_level"), help="Log level")

    args = parser.parse_args()
    configure_logging(log_level=args.log_level, service="categorize_file")

    if not args.file.exists():
        print(f"File not found: {args.file}")
        sys.exit(1)

    try:
        service = CategorizationService(
            extractor=LocalContentExtractionService(enable_ocr=not args.no_ocr),
            corpus_reader=JsonFileCorpusReader(args.corpus),
            directory=CategoryDirectory.from_file(args.categories),
            engine=CategorizationEngine(load_settings()),
        )
        result = service.categorize_file(
            args.file,
            file_type=FileType(args.type) if args.type else None,
        )
    except CategorizationError as e:
        print(f"Categorization failed: {e}")
        sys.exit(1)

    if args.json:
        output = result.model_dump(mode="json")
        output["dest_path"] = result.dest_path
        print(json.dumps(output, indent=2))
    else:
        print_result(result)


if __name__ == "__main__":
    main()
