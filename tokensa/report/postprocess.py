"""Clean-up and personalization of model output."""

import json
import re
from typing import Any, Optional

from tokensa.models.intake import GenerationRequest

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"

REPORT_KEYS = ("text", "rapport", "report", "synthese", "content")

_THINK_BLOCK_RE = re.compile(r"<think>[\s\S]*?</think>")
_DANGLING_THINK_RE = re.compile(r"<think>[\s\S]*$")

_APOS = "['’]"
_VOWELS = "AEIOUYÉÈÊÂÎÔaeiouyéèêâîô"


def strip_thinking(text: str) -> str:
    """Remove reasoning blocks emitted by thinking models (qwen3, deepseek-r1)."""
    text = _THINK_BLOCK_RE.sub("", text)
    return _DANGLING_THINK_RE.sub("", text)


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """Return the first balanced JSON object found in text, if any.

    Braces are matched while skipping string literals, so braces inside
    quoted values do not close the object early.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    try:
                        data = json.loads(text[start : i + 1])
                    except json.JSONDecodeError:
                        break
                    if isinstance(data, dict):
                        return data
                    break
        start = text.find("{", start + 1)
    return None


def extract_report_text(text: str) -> str:
    """Unwrap the report when the model answered with a JSON object."""
    data = extract_json_object(text)
    if data:
        for key in REPORT_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return text


def _keep_case(replacement: str):
    def repl(match: re.Match) -> str:
        if match.group(0)[0].isupper():
            return replacement[0].upper() + replacement[1:]
        return replacement

    return repl


def personalize(text: str, prenom: Optional[str] = None, homme: Optional[bool] = None) -> str:
    """Replace generic patient references with the first name or the right gender."""
    if prenom:
        name = prenom.strip()
        text = re.sub(r"\b[Dd]u patient\b", _keep_case(f"de {name}"), text)
        text = re.sub(r"\b[Aa]u patient\b", _keep_case(f"à {name}"), text)
        text = re.sub(rf"\b[Ll]{_APOS}enfant\b", lambda m: name, text)
        text = re.sub(r"\b[Ll]e patient\b", lambda m: name, text)
        text = re.sub(r"\b[Ll]a patiente\b", lambda m: name, text)
        if name[:1] in _VOWELS:
            escaped = re.escape(name)
            text = re.sub(rf"\b([Dd])e {escaped}\b", lambda m: f"{m.group(1)}'{name}", text)
            text = re.sub(
                rf"\b([Ll]orsqu|[Pp]uisqu|[Qq]u)e {escaped}\b",
                lambda m: f"{m.group(1)}'{name}",
                text,
            )
        return text

    if homme is False:
        text = re.sub(r"\b[Dd]u patient\b", _keep_case("de la patiente"), text)
        text = re.sub(r"\b[Aa]u patient\b", _keep_case("à la patiente"), text)
        text = re.sub(r"\b[Ll]e patient\b", _keep_case("la patiente"), text)
    elif homme is True:
        text = re.sub(r"\b[Dd]e la patiente\b", _keep_case("du patient"), text)
        text = re.sub(r"(?<!\w)[Àà] la patiente\b", _keep_case("au patient"), text)
        text = re.sub(r"\b[Ll]a patiente\b", _keep_case("le patient"), text)
    return text


def normalize_whitespace(text: str) -> str:
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def postprocess(text: str, request: GenerationRequest) -> str:
    """Full clean-up chain applied to a single-shot report."""
    text = strip_thinking(text)
    text = extract_report_text(text)
    text = personalize(text, request.prenom, request.homme)
    return normalize_whitespace(text)


def _partial_suffix(text: str, tag: str) -> int:
    """Length of the longest suffix of text that is a proper prefix of tag."""
    for size in range(min(len(tag) - 1, len(text)), 0, -1):
        if text.endswith(tag[:size]):
            return size
    return 0


class ThinkingFilter:
    """Drop <think>...</think> sections from a stream of text fragments.

    Tags may be split across fragments; a possible partial tag is held back
    until the next fragment settles it. Leading whitespace of the visible
    output is dropped.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._inside = False
        self._started = False

    def _emit(self, text: str) -> str:
        if not self._started:
            text = text.lstrip()
            if text:
                self._started = True
        return text

    def feed(self, fragment: str) -> str:
        self._buffer += fragment
        out: list[str] = []
        while True:
            tag = THINK_CLOSE if self._inside else THINK_OPEN
            idx = self._buffer.find(tag)
            if idx >= 0:
                if not self._inside:
                    out.append(self._buffer[:idx])
                self._buffer = self._buffer[idx + len(tag) :]
                self._inside = not self._inside
                continue
            keep = _partial_suffix(self._buffer, tag)
            split = len(self._buffer) - keep
            if not self._inside:
                out.append(self._buffer[:split])
            self._buffer = self._buffer[split:]
            break
        return self._emit("".join(out))

    def flush(self) -> str:
        rest = "" if self._inside else self._buffer
        self._buffer = ""
        return self._emit(rest)
