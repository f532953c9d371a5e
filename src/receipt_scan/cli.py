"""Command-line interface for receipt extraction from recognized text."""

import logging
import click
from pathlib import Path
from typing import List, Dict, Any, Optional
import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from tqdm import tqdm
import sys
import threading
from datetime import datetime
import yaml

from .config import ExtractionRules
from .exceptions import ReceiptScanError, RulesConfigError
from .ocr import OCRDumpRecognizer, ReceiptScanner
from .parse import ReceiptParser
from .review import ReviewQueue

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger(__name__)


class ReceiptProcessor:
    """Processes saved recognition output files in parallel."""

    def __init__(self,
                 rules: Optional[ExtractionRules] = None,
                 max_workers: int = 4,
                 now: Optional[datetime] = None):
        """
        Initialize the receipt processor.

        Args:
            rules: Extraction rules, packaged defaults when omitted
            max_workers: Number of parallel workers
            now: Reference instant for date validation, current time when omitted
        """
        self.max_workers = max_workers
        self.now = now

        # One parser is shared by all workers
        self.scanner = ReceiptScanner(OCRDumpRecognizer(), ReceiptParser(rules))
        self.review_queue = ReviewQueue()
        self._lock = threading.Lock()

        self.stats = {
            'total_files': 0,
            'processed': 0,
            'failed': 0,
            'review_items': 0
        }

    def find_dump_files(self, paths: List[Path]) -> List[Path]:
        """Expand files and directories into a sorted list of OCR dump files."""
        dump_files = []
        for path in paths:
            if path.is_dir():
                for suffix in OCRDumpRecognizer.SUFFIXES:
                    dump_files.extend(path.glob(f'**/*{suffix}'))
            else:
                dump_files.append(path)

        dump_files = sorted(set(dump_files))
        logger.info(f"Found {len(dump_files)} OCR dump files")
        return dump_files

    def process_single_file(self, dump_path: Path) -> Dict[str, Any]:
        """
        Extract fields from one OCR dump.

        Returns:
            Dictionary with the extraction, or the error that prevented it
        """
        try:
            extraction = self.scanner.scan(dump_path, now=self.now)
        except ReceiptScanError as e:
            logger.error(f"Failed to process {dump_path}: {e}")
            with self._lock:
                self.stats['failed'] += 1
                self.review_queue.add_item(
                    file_path=str(dump_path),
                    reason=f"Processing failed: {e}",
                )
            return {
                'file_path': str(dump_path),
                'extraction': None,
                'needs_review': True,
                'error': str(e),
            }

        with self._lock:
            needs_review = self.review_queue.add_from_extraction(str(dump_path), extraction)
            self.stats['processed'] += 1
        return {
            'file_path': str(dump_path),
            'extraction': extraction.to_dict(),
            'needs_review': needs_review,
        }

    def process_batch(self, paths: List[Path]) -> List[Dict[str, Any]]:
        """Process every dump file found under the given paths."""
        dump_files = self.find_dump_files(paths)
        self.stats['total_files'] = len(dump_files)

        if not dump_files:
            logger.warning("No OCR dump files found!")
            return []

        results = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self.process_single_file, dump_file): dump_file
                for dump_file in dump_files
            }

            with tqdm(total=len(dump_files), desc="Parsing receipts") as pbar:
                for future in as_completed(future_to_file):
                    results.append(future.result())
                    pbar.update(1)
                    with self._lock:
                        counts = {
                            'processed': self.stats['processed'],
                            'failed': self.stats['failed']
                        }
                    pbar.set_postfix(counts)

        self.stats['review_items'] = len(self.review_queue.items)
        results.sort(key=lambda r: r['file_path'])

        logger.info(f"Batch processing complete. Processed: {self.stats['processed']}, "
                    f"Failed: {self.stats['failed']}, Review items: {self.stats['review_items']}")
        return results


def _load_rules(rules_path: Optional[Path]) -> ExtractionRules:
    try:
        return ExtractionRules.load(rules_path) if rules_path else ExtractionRules.default()
    except RulesConfigError as e:
        raise click.ClickException(str(e))


@click.group()
def cli():
    """Receipt scan - extract total, merchant, date and items from recognized receipt text."""
    pass


@cli.command()
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option('--out', 'output_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Write JSON results to this file instead of stdout')
@click.option('--rules', 'rules_path', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Path to a custom extraction rules file')
@click.option('--today', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Reference date for date validation (default: now)')
@click.option('--max-workers', default=4, type=click.IntRange(min=1),
              help='Maximum number of parallel workers')
@click.option('--debug', is_flag=True, help='Enable debug output')
def parse(paths: List[Path],
          output_path: Optional[Path],
          rules_path: Optional[Path],
          today: Optional[datetime],
          max_workers: int,
          debug: bool):
    """
    Extract receipt fields from saved OCR output (.json or .txt).

    Example:
        receipt-scan parse ./ocr_dumps --out results.json
    """
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        click.echo("Debug mode enabled - candidate selection will be logged", err=True)

    rules = _load_rules(rules_path)
    processor = ReceiptProcessor(rules=rules, max_workers=max_workers, now=today)

    try:
        results = processor.process_batch(list(paths))
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    payload = json.dumps(results, indent=2, ensure_ascii=False)
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload + "\n", encoding='utf-8')
    else:
        click.echo(payload)

    # Keep stdout clean for JSON when no output file is given
    to_stderr = output_path is None
    click.echo("=" * 50, err=to_stderr)
    click.echo("PROCESSING SUMMARY", err=to_stderr)
    click.echo("=" * 50, err=to_stderr)
    click.echo(f"Total files found: {processor.stats['total_files']}", err=to_stderr)
    click.echo(f"Successfully processed: {processor.stats['processed']}", err=to_stderr)
    click.echo(f"Failed: {processor.stats['failed']}", err=to_stderr)
    click.echo(f"Items needing review: {len(processor.review_queue.items)}", err=to_stderr)
    if output_path:
        click.echo(f"Results: {output_path}")

    for item in processor.review_queue.items:
        click.echo(f"  - {Path(item.file_path).name}: {item.reason}", err=to_stderr)


@cli.command()
@click.option('--rules', 'rules_path', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Path to a custom extraction rules file')
def rules(rules_path: Optional[Path]):
    """Show the active extraction rules."""
    active = _load_rules(rules_path)
    click.echo(yaml.safe_dump(active.describe(), sort_keys=False, allow_unicode=True))


if __name__ == '__main__':
    cli()
