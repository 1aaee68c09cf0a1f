"""
Console host for status indicators.

Terminal rendition of the host UI shell: prints the visible indicators with
their color tier and, on request, their tooltips. Uses rich for styling.
"""

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..models.metrics import ColorTier
from ..core.render import Indicator, IndicatorIcon, RenderSink
from ..utils.helpers import create_progress_bar

# Rich styles per color tier
TIER_STYLES = {
    ColorTier.NORMAL: "green",
    ColorTier.WARNING: "yellow",
    ColorTier.CRITICAL: "bold red",
}

# Rich emoji markup per indicator icon
ICON_MARKUP = {
    IndicatorIcon.PULSE: ":bar_chart:",
    IndicatorIcon.UNAVAILABLE: ":no_entry_sign:",
    IndicatorIcon.ERROR: ":warning:",
}


def indicator_text(indicator: Indicator) -> Text:
    """Styled one-line rendition of an indicator."""
    style = TIER_STYLES[indicator.color_tier]
    if indicator.icon != IndicatorIcon.PULSE:
        style = "red" if indicator.icon == IndicatorIcon.ERROR else "dim"
    text = Text.from_markup(f"{ICON_MARKUP[indicator.icon]} ")
    text.append(f"{indicator.label}: ", style="bold")
    text.append(indicator.text, style=style)
    return text


class ConsoleHost:
    """
    Prints indicator updates after every render.
    """

    def __init__(self, console: Optional[Console] = None, show_tooltips: bool = False,
                 timestamps: bool = True):
        """
        Initialize console host.

        Args:
            console: Rich console to print to (defaults to stdout)
            show_tooltips: Print each visible indicator's tooltip below the status line
            timestamps: Prefix status lines with the render time
        """
        self.console = console or Console()
        self.show_tooltips = show_tooltips
        self.timestamps = timestamps

    def attach(self, sink: RenderSink) -> None:
        sink.add_listener(self.on_render)

    def on_render(self, sink: RenderSink) -> None:
        indicators = sink.visible_indicators()

        line = Text()
        if self.timestamps:
            line.append(f"[{datetime.now().strftime('%H:%M:%S')}] ", style="dim")
        for i, indicator in enumerate(indicators):
            if i:
                line.append("  ")
            line.append_text(indicator_text(indicator))
        self.console.print(line)

        if self.show_tooltips:
            for indicator in indicators:
                self.print_tooltip(indicator, sink)

    def print_tooltip(self, indicator: Indicator, sink: RenderSink) -> None:
        """Print an indicator's tooltip in a panel, with usage bars for providers."""
        body = Text(indicator.tooltip)
        snapshot = sink.last_snapshot
        if snapshot is not None and snapshot.metrics:
            body.append("\n")
            for provider_id, metric in snapshot.metrics.items():
                if indicator.key not in ("main", provider_id.value):
                    continue
                if metric.is_balance_only:
                    continue
                tier = snapshot.color_tiers.get(provider_id, ColorTier.NORMAL)
                body.append(f"\n{provider_id.display_name:<11}")
                body.append(create_progress_bar(metric.peak_percent), style=TIER_STYLES[tier])
        self.console.print(
            Panel(body, title=indicator.label, border_style=TIER_STYLES[indicator.color_tier], expand=False)
        )
