"""HTML message with a file attachment, written to an ``.eml`` file."""

from __future__ import annotations

import tempfile
from pathlib import Path

from mimepost.mail import MailMessage


def build_html_message(output: Path) -> None:
    """Write an HTML message carrying a small CSV report to *output*."""
    workdir = Path(tempfile.mkdtemp())
    report = workdir / "report.csv"
    report.write_text("day,sent\nmonday,12\ntuesday,7\n", encoding="utf-8")

    message = (
        MailMessage()
        .set_from("reports@example.com")
        .set_to("team@example.com")
        .set_subject("Rapport hebdomadaire ✅")
        .set_html("<p>Bonjour,</p><p>Le rapport de la semaine est joint.</p>")
        .add_attachment(report)
    )
    with output.open("wb") as handle:
        message.write(handle)
    print(f"Message written to {output}")


if __name__ == "__main__":  # pragma: no cover - manual example
    build_html_message(Path("weekly_report.eml"))
