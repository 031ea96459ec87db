"""
tocedit command-line tool.

Usage Examples:
    # Detect a draft TOC from extracted text
    tocedit detect book.txt --output toc.json

    # Ask the AI extractor instead
    tocedit extract book.txt --output toc.json --api-key $MISTRAL_API_KEY

    # Write the (edited) TOC into the PDF as bookmarks
    tocedit apply book.pdf toc.json --offset 2
"""

from pathlib import Path
from typing import List, Optional

from typing_extensions import Annotated
from globalog import LOG, LoggerLevel
import typer

from tocedit.config import SaveConfig
from tocedit.document.page_ops import extract_page_range, merge_pdfs
from tocedit.editor import detect_toc, extract_toc, save_pdf_with_outline
from tocedit.exceptions import ExternalServiceError, InvalidInputFileError
from tocedit.extraction.ai_config import AiExtractionConfig


app = typer.Typer(
    help="Edit the table of contents of PDF files and write it as bookmarks."
)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
) -> None:
    if verbose:
        LOG.init(level=LoggerLevel.DEBUG)


@app.command()
def detect(
    text_file: Annotated[Path, typer.Argument(help="Plain-text file with the document text.")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Where to write the TOC JSON.")] = Path("toc.json"),
    offset: Annotated[int, typer.Option("--offset", help="Page offset stored with the TOC.")] = 0,
) -> None:
    """Detect a draft TOC with the heuristic heading classifier."""
    text = text_file.read_text(encoding="utf-8")
    toc = detect_toc(text, page_offset=offset)
    toc.dump(str(output))
    LOG.info(f"Wrote {len(toc)} entries to {output}")


@app.command()
def extract(
    text_file: Annotated[Path, typer.Argument(help="Plain-text file with the document text.")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Where to write the TOC JSON.")] = Path("toc.json"),
    offset: Annotated[int, typer.Option("--offset", help="Page offset stored with the TOC.")] = 0,
    api_key: Annotated[
        Optional[str],
        typer.Option("--api-key", help="Mistral API key. Can also be set via MISTRAL_API_KEY env var."),
    ] = None,
    model: Annotated[Optional[str], typer.Option("--model", help="Chat model to use.")] = None,
    config_file: Annotated[
        Optional[Path], typer.Option("--config", help="JSON file with AI extraction settings.")
    ] = None,
) -> None:
    """Extract a TOC with the AI extractor."""
    config = AiExtractionConfig.from_file(str(config_file)) if config_file else AiExtractionConfig.from_env()
    if api_key:
        config.api_key = api_key
    if model:
        config.model = model

    if not config.api_key:
        LOG.info("Error: No API key provided. "
                 "Set MISTRAL_API_KEY environment variable or use --api-key option.")
        raise typer.Exit(code=1)

    text = text_file.read_text(encoding="utf-8")
    try:
        toc = extract_toc(text, config, page_offset=offset)
    except ExternalServiceError:
        LOG.error("AI extraction failed", exc_info=True)
        raise typer.Exit(code=1)

    toc.dump(str(output))
    LOG.info(f"Wrote {len(toc)} entries to {output}")


@app.command()
def apply(
    pdf_file: Annotated[Path, typer.Argument(help="Source PDF.")],
    toc_file: Annotated[Path, typer.Argument(help="TOC JSON file.")],
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Output PDF (default: <name>_with_toc.pdf).")
    ] = None,
    offset: Annotated[
        Optional[int], typer.Option("--offset", help="Override the page offset stored in the TOC file.")
    ] = None,
    title: Annotated[Optional[str], typer.Option("--title", help="Document title metadata.")] = None,
    config_file: Annotated[
        Optional[Path], typer.Option("--config", help="JSON file with save settings.")
    ] = None,
) -> None:
    """Write the TOC into the PDF as bookmarks."""
    config = SaveConfig.from_file(str(config_file)) if config_file else SaveConfig.from_env()
    try:
        result = save_pdf_with_outline(
            pdf_file, toc_file, output_path=output, page_offset=offset, title=title, config=config
        )
    except InvalidInputFileError as e:
        LOG.error(f"Error: {e}")
        raise typer.Exit(code=1)

    if result.degraded:
        LOG.warning(f"Saved without bookmarks because the outline could not be built: {result.error}")
    elif not result.had_outline:
        LOG.warning("Saved without bookmarks: no TOC entry points to a page of this document.")
    else:
        LOG.info(f"Saved with {result.node_count} bookmarks ({result.skipped_count} entries skipped).")


@app.command()
def split(
    pdf_file: Annotated[Path, typer.Argument(help="Source PDF.")],
    start: Annotated[int, typer.Argument(help="First page (1-based).")],
    end: Annotated[int, typer.Argument(help="Last page (1-based, inclusive).")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output PDF.")] = Path("split.pdf"),
) -> None:
    """Copy a page range into a new PDF."""
    try:
        data = extract_page_range(pdf_file.read_bytes(), start, end)
    except ValueError as e:
        LOG.error(f"Error: {e}")
        raise typer.Exit(code=1)
    output.write_bytes(data)
    LOG.info(f"Wrote pages {start}-{end} to {output}")


@app.command()
def merge(
    pdf_files: Annotated[List[Path], typer.Argument(help="PDFs to concatenate, in order.")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output PDF.")] = Path("merged.pdf"),
) -> None:
    """Concatenate several PDFs."""
    data = merge_pdfs([path.read_bytes() for path in pdf_files])
    output.write_bytes(data)
    LOG.info(f"Merged {len(pdf_files)} files into {output}")


if __name__ == "__main__":
    app()
