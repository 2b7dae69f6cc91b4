from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pypdf import PdfReader

from autosearchpro.models import normalize_whitespace


@dataclass(frozen=True)
class LoadedDescription:
    text: str
    source: str  # "text" | "pdf" | "inline" | "none"
    path: Optional[str] = None


def load_description(*, text: Optional[str] = None, path: Optional[str] = None) -> LoadedDescription:
    """
    Load a job description for keyword analysis.
    Precedence:
      1) inline text (pasted)
      2) path: .pdf via pypdf, anything else read as UTF-8 text
      3) none
    Best-effort: failures return source='none' and empty text.
    """
    if text and text.strip():
        return LoadedDescription(text=text.strip(), source="inline")

    if not path:
        return LoadedDescription(text="", source="none", path=None)

    p = Path(path)
    if p.suffix.lower() == ".pdf":
        try:
            reader = PdfReader(str(p))
            parts = []
            for page in reader.pages:
                t = page.extract_text() or ""
                if t.strip():
                    parts.append(normalize_whitespace(t))
            joined = "\n".join(parts).strip()
            if not joined:
                return LoadedDescription(text="", source="none", path=str(p))
            return LoadedDescription(text=joined, source="pdf", path=str(p))
        except Exception:
            return LoadedDescription(text="", source="none", path=str(p))

    try:
        return LoadedDescription(text=p.read_text(encoding="utf-8").strip(), source="text", path=str(p))
    except Exception:
        return LoadedDescription(text="", source="none", path=str(p))
