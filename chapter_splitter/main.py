"""CLI entry point: split every PDF in a directory along its chapters."""

import argparse
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from chapter_splitter.config import ProcessOptions, options_from_env
from chapter_splitter.errors import DocumentLoadFailure
from chapter_splitter.pipeline.author import PypdfAuthor
from chapter_splitter.pipeline.loader import open_document
from chapter_splitter.pipeline.outline import extract_outline
from chapter_splitter.pipeline.splitter import split_by_outline, split_by_pages
from chapter_splitter.state import ProcessResult

logger = logging.getLogger(__name__)


def _open_author(path: Path) -> PypdfAuthor:
    try:
        return PypdfAuthor(path)
    except Exception as exc:
        raise DocumentLoadFailure(f"Cannot load {path} for copying: {exc}") from exc


def process_document(document_path: str | Path, output_dir: str | Path,
                     options: ProcessOptions | None = None) -> ProcessResult:
    """Extract the outline of one PDF and write its parts into output_dir.

    Raises DocumentLoadFailure if the PDF cannot be opened.
    """
    options = options or ProcessOptions()
    path = Path(document_path)
    output_dir = Path(output_dir)

    with open_document(path) as source:
        total_pages = source.page_count
        logger.info("%s has %d pages", path.name, total_pages)
        outline = extract_outline(source, options)

    result = ProcessResult(document=path, outline=outline)
    for entry in outline.entries:
        logger.info("- %s (page %d)", entry.title, entry.target_page + 1)

    if outline.entries:
        author = _open_author(path)
        result.outputs = split_by_outline(author, outline.entries, total_pages, output_dir, path.stem)
        result.split_mode = "chapters"
    elif options.fallback_mode:
        author = _open_author(path)
        result.outputs = split_by_pages(author, total_pages, options.pages_per_file, output_dir, path.stem)
        result.split_mode = "fixed"

    logger.info(result.summary())
    return result


def find_pdfs(input_dir: Path) -> list[Path]:
    return sorted(p for p in input_dir.iterdir() if p.is_file() and p.suffix.lower() == ".pdf")


def run_batch(input_dir: Path, output_dir: Path, options: ProcessOptions) -> list[ProcessResult]:
    """Process each PDF in turn; a PDF that fails does not stop the batch."""
    pdfs = find_pdfs(input_dir)
    if not pdfs:
        logger.info("No PDF files in %s", input_dir)
        return []

    logger.info("Found %d PDF files", len(pdfs))
    output_dir.mkdir(parents=True, exist_ok=True)

    results: list[ProcessResult] = []
    for pdf_path in pdfs:
        try:
            results.append(process_document(pdf_path, output_dir / pdf_path.stem, options))
        except DocumentLoadFailure as exc:
            logger.warning("Skipping %s: %s", pdf_path.name, exc)
        except Exception:
            logger.exception("Failed to process %s", pdf_path.name)
    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Split PDFs into chapters using their bookmarks or TOC page.")
    try:
        defaults = options_from_env()
    except ValueError as exc:
        parser.error(str(exc))

    parser.add_argument("--input-dir", "-i", default="./input")
    parser.add_argument("--output-dir", "-o", default="./output")
    parser.add_argument("--fallback-mode", "-f", action=argparse.BooleanOptionalAction,
                        default=defaults.fallback_mode,
                        help="split into fixed-size parts when no outline is found")
    parser.add_argument("--pages-per-file", "-p", type=int, default=defaults.pages_per_file)
    parser.add_argument("--max-toc-scan", "-t", type=int, default=defaults.max_toc_scan_pages,
                        help="number of leading pages searched for a TOC page")
    parser.add_argument("--lenient-toc", action=argparse.BooleanOptionalAction,
                        default=defaults.lenient_toc_detection,
                        help="accept TOC pages without link annotations")
    parser.add_argument("--sort-toc-entries", action=argparse.BooleanOptionalAction,
                        default=defaults.sort_toc_entries,
                        help="sort TOC page entries by target page and drop duplicates")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        options = ProcessOptions(
            fallback_mode=args.fallback_mode,
            pages_per_file=args.pages_per_file,
            max_toc_scan_pages=args.max_toc_scan,
            toc_keywords=defaults.toc_keywords,
            lenient_toc_detection=args.lenient_toc,
            text_only_fallback=defaults.text_only_fallback,
            sort_toc_entries=args.sort_toc_entries,
        )
    except ValueError as exc:
        parser.error(str(exc))

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        logger.error("Input directory not found: %s", input_dir)
        return 1

    start = time.time()
    results = run_batch(input_dir, Path(args.output_dir), options)

    split = sum(1 for r in results if r.outputs)
    logger.info("Done: %d documents processed, %d split (%.1fs)", len(results), split, time.time() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
