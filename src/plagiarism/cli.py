#!/usr/bin/env python3
"""
Plagiarism report CLI tool.
Usage:
  python -m plagiarism.cli compare file1 file2 [--ngram N] [--threshold THRESHOLD]
  python -m plagiarism.cli report TASK_ID
Outputs JSON to stdout.
"""

import argparse
import asyncio
import json
import os
import sys

from exceptions.exceptions import PlagiarismServiceError
from plagiarism.analyzer import DEFAULT_NGRAM_SIZE, DEFAULT_THRESHOLD, TextAnalyzer
from plagiarism.extractor import LocalTextExtractor
from plagiarism.service import PlagiarismChecker
from plagiarism.validation import validate_task_id


def fail(message: str) -> None:
    print(json.dumps({"error": message}))
    sys.exit(1)


def cmd_compare(args):
    for path in (args.file1, args.file2):
        if not os.path.exists(path):
            fail(f"File not found: {path}")

    checker = PlagiarismChecker(LocalTextExtractor(), TextAnalyzer(args.ngram, args.threshold))
    try:
        similarity = asyncio.run(checker.compare_files(args.file1, args.file2))
    except PlagiarismServiceError as e:
        fail(str(e))

    result = {
        "similarity": similarity,
        "similarity_percent": round(similarity * 100, 2),
        "is_match": checker.is_plagiarized(similarity),
        "file1": args.file1,
        "file2": args.file2,
    }
    print(json.dumps(result))


async def run_report(task_id: str) -> dict:
    from app import app, lifespan

    async with lifespan(app):
        report = await app.state.plagiarism_service.get_or_compute_report(task_id)
    return report.model_dump(mode="json")


def cmd_report(args):
    try:
        validate_task_id(args.task_id)
        result = asyncio.run(run_report(args.task_id))
    except PlagiarismServiceError as e:
        fail(str(e))

    print(json.dumps(result, ensure_ascii=False))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Plagiarism report tool"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    compare_parser = subparsers.add_parser("compare", help="Compare two local files for similarity")
    compare_parser.add_argument("file1", help="Path to the first file")
    compare_parser.add_argument("file2", help="Path to the second file")
    compare_parser.add_argument("--ngram", "-n", type=int, default=DEFAULT_NGRAM_SIZE,
                                help=f"N-gram size in words (default: {DEFAULT_NGRAM_SIZE})")
    compare_parser.add_argument("--threshold", "-t", type=float, default=DEFAULT_THRESHOLD,
                                help=f"Similarity counted as plagiarism (default: {DEFAULT_THRESHOLD})")

    report_parser = subparsers.add_parser("report", help="Get or compute the plagiarism report of a task")
    report_parser.add_argument("task_id", help="Task identifier")

    args = parser.parse_args(argv)

    if args.command == "compare":
        cmd_compare(args)
    elif args.command == "report":
        cmd_report(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
