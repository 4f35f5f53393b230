from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .model import MatchType, ScoredCustomer, SimilarityResult
from .normalize import format_phone_display

console = Console()

# ── Palette ────────────────────────────────────────────────────────────────────
_ACCENT  = "#4d9fff"
_GREEN   = "#3ecf8e"
_AMBER   = "#f0a500"
_RED     = "#f05c5c"
_TEXT    = "#c9d1e0"
_MID     = "#8896af"
_DIM     = "#546075"
_BORDER  = "#2a3347"

_TYPE_COLOURS = {
    MatchType.COMBINED:    _GREEN,
    MatchType.PHONE_ONLY:  _ACCENT,
    MatchType.NAME_ONLY:   _ACCENT,
    MatchType.WEIGHTED:    _TEXT,
    MatchType.PHONE_FLOOR: _DIM,
    MatchType.NAME_FLOOR:  _DIM,
}


def _score_colour(score: int) -> str:
    if score >= 85:
        return _RED
    if score >= 65:
        return _AMBER
    return _MID


def _cell(value: str, matched: bool) -> Text:
    return Text(value, style=f"bold {_GREEN}" if matched else _TEXT)


def candidates_table(candidates: list[ScoredCustomer], region: str = "GR") -> Table:
    table = Table(show_header=True, header_style=f"bold {_MID}", border_style=_BORDER)
    table.add_column("Score", justify="right", no_wrap=True)
    table.add_column("Match")
    table.add_column("Company")
    table.add_column("Telephone", no_wrap=True)
    table.add_column("AFM", no_wrap=True)
    table.add_column("Id", style=f"dim {_DIM}")
    for c in candidates:
        reasons = c.match_reasons
        table.add_row(
            Text(str(c.similarity_score), style=f"bold {_score_colour(c.similarity_score)}"),
            Text(str(c.match_type), style=_TYPE_COLOURS.get(c.match_type, _TEXT)),
            _cell(c.customer.company_name, reasons.company_name),
            _cell(format_phone_display(c.customer.telephone, region), reasons.telephone),
            _cell(c.customer.afm, reasons.afm),
            c.customer.id,
        )
    return table


def print_candidates(
    candidates: list[ScoredCustomer],
    *,
    title: str = "POSSIBLE DUPLICATES",
    region: str = "GR",
) -> None:
    console.print()
    if not candidates:
        console.print(Text("  No likely duplicates found.", style=f"dim {_DIM}"))
        console.print()
        return
    console.print(Text(f"  {title}  {len(candidates)}", style=f"dim {_DIM}"))
    console.print(candidates_table(candidates, region))
    console.print()


def print_lookup_failed(error: str | None) -> None:
    body = Text()
    body.append("Duplicate lookup failed\n", style=f"bold {_RED}")
    body.append("Results are unknown, not empty. ", style=_TEXT)
    if error:
        body.append(error, style=f"dim {_MID}")
    console.print(Panel(body, border_style=_RED, padding=(0, 2)))


def print_comparison(result: SimilarityResult) -> None:
    d = result.details
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style=_MID)
    table.add_column(justify="right")
    table.add_row("company name", Text(str(d.name_score), style=_TEXT))
    table.add_row("telephone", Text(str(d.phone_score), style=_TEXT))
    table.add_row("afm", Text(str(d.afm_score), style=_TEXT))
    table.add_row(
        "composite",
        Text(str(result.score), style=f"bold {_score_colour(result.score)}"),
    )
    console.print(Panel(table, title=Text("SIMILARITY", style=f"dim {_DIM}"),
                        title_align="left", border_style=_BORDER, padding=(0, 1)))
