from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Tuple, TypedDict

import typer
import yaml

from .config import CbmConfig, load_config
from .issues import Issue, IssuePayloadError, issues_from_payload
from .mapping import apply_insertions
from .models import Document, DocumentResult
from .pipeline import process_corpus

app = typer.Typer(help="CBM writing token/insertion CLI.", no_args_is_help=True)

# Grammar-checker output lives next to each text file under this suffix.
ISSUES_SUFFIX = ".issues.json"
SUPPORTED_INPUT_EXTENSIONS = {".txt"}


class InsertionPayload(TypedDict):
    at: int
    text: str
    beforeBIndex: int
    rule: str


class ApplySummaryEntry(TypedDict):
    doc_id: str
    insertions: List[InsertionPayload]


@app.command()
def analyze(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=True, file_okay=True
    ),
    issues: Path | None = typer.Option(
        None,
        "--issues",
        "-i",
        exists=True,
        dir_okay=False,
        help="Grammar-checker JSON for a single input file.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    paragraph_fallback: bool | None = typer.Option(
        None,
        "--paragraph-fallback/--no-paragraph-fallback",
        help="Override config paragraph_fallback flag.",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (e.g. DEBUG, INFO)."
    ),
) -> None:
    """Tokenize texts, map their issues and emit the scoring model as JSON."""
    cfg = _prepare_config(config, paragraph_fallback, log_level)
    documents, issues_by_doc = _load_inputs(input_path, issues)
    results = process_corpus(documents, issues_by_doc, cfg)
    summary = [results[doc_id].to_dict() for doc_id in sorted(results)]
    typer.echo(json.dumps({"documents": summary}, indent=2, ensure_ascii=False))


@app.command()
def apply(
    input_path: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=True, file_okay=True
    ),
    output_path: Path = typer.Option(..., file_okay=False),
    issues: Path | None = typer.Option(
        None,
        "--issues",
        "-i",
        exists=True,
        dir_okay=False,
        help="Grammar-checker JSON for a single input file.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    paragraph_fallback: bool | None = typer.Option(
        None,
        "--paragraph-fallback/--no-paragraph-fallback",
        help="Override config paragraph_fallback flag.",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (e.g. DEBUG, INFO)."
    ),
) -> None:
    """Write each text with its insertions applied, plus a summary."""
    cfg = _prepare_config(config, paragraph_fallback, log_level)
    documents, issues_by_doc = _load_inputs(input_path, issues)
    results = process_corpus(documents, issues_by_doc, cfg)
    texts = {doc.doc_id: doc.text for doc in documents}

    output_path.mkdir(parents=True, exist_ok=True)
    summary_items: List[ApplySummaryEntry] = []
    for doc_id in sorted(results):
        result = results[doc_id]
        dest = output_path / doc_id
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(
            apply_insertions(texts[doc_id], result.insertions), encoding="utf-8"
        )
        summary_items.append(
            {"doc_id": doc_id, "insertions": _insertion_payloads(result)}
        )

    summary_path = output_path / "summary.json"
    summary_path.write_text(
        json.dumps({"documents": summary_items}, indent=2), encoding="utf-8"
    )
    typer.echo(f"Wrote corrected documents to {output_path} and summary to {summary_path}")


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = CbmConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _prepare_config(
    config_path: Path | None,
    paragraph_fallback: bool | None,
    log_level: str | None,
) -> CbmConfig:
    """Load config, apply CLI overrides and configure logging."""
    try:
        cfg = load_config(config_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    if paragraph_fallback is not None:
        cfg.paragraph_fallback = paragraph_fallback
    if log_level:
        cfg.log_level = log_level
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    return cfg


def _load_inputs(
    input_path: Path, issues_path: Path | None
) -> Tuple[List[Document], Dict[str, List[Issue]]]:
    """Expand the input path into documents plus their grammar issues."""
    if input_path.is_file():
        doc = Document(doc_id=input_path.name, text=input_path.read_text(encoding="utf-8"))
        source = issues_path or _sidecar_path(input_path)
        return [doc], {doc.doc_id: _read_issues(source, doc.text)}

    if issues_path is not None:
        raise typer.BadParameter(
            "--issues only applies to a single input file; use sidecar files for directories.",
            param_hint="--issues",
        )

    files = sorted(
        p
        for p in input_path.rglob("*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_INPUT_EXTENSIONS
    )
    documents: List[Document] = []
    issues_by_doc: Dict[str, List[Issue]] = {}
    for file in files:
        # Relative ids keep the output tree mirroring the input tree.
        relative_id = file.relative_to(input_path).as_posix()
        doc = Document(doc_id=relative_id, text=file.read_text(encoding="utf-8"))
        documents.append(doc)
        issues_by_doc[relative_id] = _read_issues(_sidecar_path(file), doc.text)
    return documents, issues_by_doc


def _sidecar_path(text_path: Path) -> Path:
    return text_path.with_name(text_path.stem + ISSUES_SUFFIX)


def _read_issues(path: Path, text: str) -> List[Issue]:
    """Read LanguageTool or GrammarBot JSON; a missing file means no issues."""
    if not path.exists():
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return issues_from_payload(payload, text)
    except (json.JSONDecodeError, UnicodeDecodeError, IssuePayloadError) as exc:
        raise typer.BadParameter(f"{path}: {exc}") from exc


def _insertion_payloads(result: DocumentResult) -> List[InsertionPayload]:
    return [
        {
            "at": insertion.at,
            "text": insertion.text,
            "beforeBIndex": insertion.before_b_index,
            "rule": insertion.rule,
        }
        for insertion in result.insertions
    ]


if __name__ == "__main__":
    main()
