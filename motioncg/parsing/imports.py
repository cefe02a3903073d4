from __future__ import annotations
import re
from dataclasses import dataclass

_ESM_IMPORT_RE = re.compile(
    r'^[ \t]*import\s+(type\s+)?([\w\{\}\*,\s$]+?)\s+from\s+[\'"]([^\'"]+)[\'"];?[ \t]*$'
    r'|^[ \t]*import\s+[\'"]([^\'"]+)[\'"];?[ \t]*$',
    re.MULTILINE
)
_NAMED_RE = re.compile(r"\{([^}]*)\}")


@dataclass
class ImportLine:
    start: int
    end: int
    source: str
    default: str | None
    named: list[str]
    type_only: bool = False

    def render(self) -> str:
        parts = [self.default] if self.default else []
        if self.named:
            parts.append("{ " + ", ".join(self.named) + " }")
        head = "import type " if self.type_only else "import "
        if not parts:
            return f"import '{self.source}';"
        return f"{head}{', '.join(parts)} from '{self.source}';"


def _local(spec: str) -> str:
    return spec.split(" as ")[-1].strip()


def read_import_lines(text: str) -> list[ImportLine]:
    out: list[ImportLine] = []
    for m in _ESM_IMPORT_RE.finditer(text or ""):
        if m.group(4):
            out.append(ImportLine(m.start(), m.end(), m.group(4), None, []))
            continue
        clause = m.group(2)
        named: list[str] = []
        nm = _NAMED_RE.search(clause)
        if nm:
            named = [" ".join(s.split()) for s in nm.group(1).split(",") if s.strip()]
            clause = clause[:nm.start()] + clause[nm.end():]
        default = clause.replace(",", " ").strip() or None
        if default and default.startswith("*"):
            default = " ".join(default.split())
        out.append(ImportLine(m.start(), m.end(), m.group(3), default, named, bool(m.group(1))))
    return out


def split_imports(text: str) -> tuple[str, str]:
    """(leading import block, remainder)"""
    lines = read_import_lines(text)
    if not lines or text[:lines[0].start].strip():
        return "", text
    end = 0
    for line in lines:
        if text[end:line.start].strip():
            break
        end = line.end
    return text[:end].strip("\n"), text[end:].lstrip("\n")


def _used(text: str, name: str) -> bool:
    return re.search(rf"(?<![\w$.]){re.escape(name)}(?![\w$])", text) is not None


def unused_specifiers(text: str, sources: set[str] | None = None) -> list[str]:
    lines = read_import_lines(text)
    body = text
    for line in reversed(lines):
        body = body[:line.start] + body[line.end:]
    out: list[str] = []
    for line in lines:
        if sources is not None and line.source not in sources:
            continue
        for spec in line.named:
            if not _used(body, _local(spec)):
                out.append(_local(spec))
        if line.default and not line.default.startswith("*") and not _used(body, line.default):
            out.append(line.default)
    return out


def rewrite_imports(text: str, remove: set[str] | None = None, tidy_sources: set[str] | None = None) -> str:
    """Drop the given local names; dedupe and sort named specifiers of `tidy_sources`."""
    remove = remove or set()
    lines = read_import_lines(text)
    for line in reversed(lines):
        if not line.named and not line.default:
            continue
        named = [s for s in line.named if _local(s) not in remove]
        default = line.default if line.default not in remove else None
        if tidy_sources is not None and line.source in tidy_sources:
            named = sorted(dict.fromkeys(named), key=lambda s: _local(s).lower())
        if not named and not default:
            end = line.end + 1 if text[line.end:line.end + 1] == "\n" else line.end
            text = text[:line.start] + text[end:]
            continue
        updated = ImportLine(line.start, line.end, line.source, default, named, line.type_only)
        raw = text[line.start:line.end]
        indent = raw[:len(raw) - len(raw.lstrip())]
        text = text[:line.start] + indent + updated.render() + text[line.end:]
    return text


def add_import(text: str, source: str, name: str) -> str:
    """Add a named import, merging into an existing line for the same source."""
    lines = read_import_lines(text)
    for line in lines:
        if line.source == source and not line.type_only and (line.named or line.default):
            if name in [_local(s) for s in line.named] or line.default == name:
                return text
            line.named.append(name)
            return text[:line.start] + line.render() + text[line.end:]
    new = f"import {{ {name} }} from '{source}';\n"
    if lines:
        last = lines[-1]
        return text[:last.end] + "\n" + new.rstrip("\n") + text[last.end:]
    return new + ("\n" if not text.startswith("\n") else "") + text
