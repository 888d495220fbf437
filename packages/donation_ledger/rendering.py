"""Acknowledgement rendering (Jinja2).

Template references are file names resolved first in an optional operator
template folder and then among the templates bundled with the package. The
bound variables are exactly the fields of
:class:`~donation_ledger.models.AcknowledgementBindings`; ``StrictUndefined``
turns a misspelled variable into a render error rather than a blank.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    TemplateNotFound,
    select_autoescape,
)

from .errors import ConfigurationError
from .models import AcknowledgementBindings


def _format_amount(value: object) -> str:
    return f"${value:,.2f}"


def _format_date(value: object) -> str:
    strftime = getattr(value, "strftime", None)
    if strftime is None:
        return str(value)
    return f"{value:%B} {value.day}, {value.year}"


class TemplateRenderer:
    """Render acknowledgement templates with a fixed binding set."""

    def __init__(self, template_folder: str | Path | None = None) -> None:
        loaders = []
        if template_folder is not None:
            loaders.append(FileSystemLoader(str(template_folder)))
        loaders.append(PackageLoader("donation_ledger", "templates"))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            undefined=StrictUndefined,
            autoescape=select_autoescape(["html", "htm", "j2"], default_for_string=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["amount"] = _format_amount
        self.env.filters["long_date"] = _format_date

    def validate(self, references: Sequence[str]) -> None:
        """Fail fast with ``ConfigurationError`` when a reference cannot be loaded."""

        for reference in references:
            try:
                self.env.get_template(reference)
            except TemplateNotFound as exc:
                raise ConfigurationError(f"template not found: {reference}") from exc

    def render(self, reference: str, bindings: AcknowledgementBindings) -> str:
        return self.env.get_template(reference).render(**bindings.as_context())

    def render_document(self, reference: str, bindings: AcknowledgementBindings) -> bytes:
        """Render a stand-alone letter for the output area (UTF-8 HTML)."""

        return self.render(reference, bindings).encode("utf-8")


__all__ = ["TemplateRenderer"]
