"""Byte-encoding detection for untagged manuscripts.

Detection is an ordered chain of probes. Each probe either returns a
``DecodedText`` or ``None``; the chain ends with a lossy UTF-8 decode that
always succeeds, so ``detect_encoding`` never raises.

Order:
    1. UTF-8 byte-order mark
    2. UTF-16 LE byte-order mark
    3. UTF-16 BE byte-order mark
    4. strict UTF-8
    5. legacy GBK family codecs, in configured order
    6. the first known legacy codec with replacement characters
    7. lossy UTF-8, only when no legacy codec is configured or known
"""

import codecs
import functools
import logging
from collections.abc import Callable

import chardet

from novelcore.config import EncodingConfig
from novelcore.models.parsed import DecodedText

logger = logging.getLogger(__name__)

# Checked in order; the UTF-8 mark is three bytes, the UTF-16 marks two.
BYTE_ORDER_MARKS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

# chardet labels considered to agree with a GBK-family decode
GB_FAMILY: frozenset[str] = frozenset({"gb2312", "gbk", "gb18030", "hz-gb-2312"})

Probe = Callable[[bytes, bool], DecodedText | None]


def _decode(raw: bytes, encoding: str, partial: bool, errors: str = "strict") -> str:
    """Decode ``raw``; with ``partial`` a truncated trailing sequence is dropped."""
    decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
    return decoder.decode(raw, final=not partial)


def _probe_bom(raw: bytes, partial: bool) -> DecodedText | None:
    for mark, encoding in BYTE_ORDER_MARKS:
        if raw.startswith(mark):
            text = _decode(raw[len(mark):], encoding, partial, errors="replace")
            return DecodedText(text=text, encoding=encoding, confidence=1.0)
    return None


def _probe_utf8(raw: bytes, partial: bool) -> DecodedText | None:
    try:
        text = _decode(raw, "utf-8", partial)
    except UnicodeDecodeError:
        return None
    return DecodedText(text=text, encoding="utf-8", confidence=1.0)


def _probe_legacy(
    raw: bytes, partial: bool, *, encoding: str, config: EncodingConfig
) -> DecodedText | None:
    try:
        text = _decode(raw, encoding, partial)
    except UnicodeDecodeError:
        return None
    except LookupError:
        logger.warning("Unknown fallback encoding in configuration: %s", encoding)
        return None

    confidence = _legacy_confidence(raw[: config.sample_bytes])
    if confidence < config.min_confidence:
        logger.warning(
            "Low confidence legacy decode as %s (%.0f%%)",
            encoding,
            confidence * 100,
        )
    return DecodedText(text=text, encoding=encoding, confidence=confidence)


def _probe_legacy_lossy(
    raw: bytes, partial: bool, *, config: EncodingConfig
) -> DecodedText | None:
    """Decode with the first known legacy codec, replacing bad bytes."""
    for encoding in config.fallback_encodings:
        try:
            text = _decode(raw, encoding, partial, errors="replace")
        except LookupError:
            continue
        logger.warning(
            "Invalid bytes for every legacy codec; decoding as %s with replacement",
            encoding,
        )
        confidence = _legacy_confidence(raw[: config.sample_bytes])
        return DecodedText(text=text, encoding=encoding, confidence=confidence, lossy=True)
    return None


def _legacy_confidence(sample: bytes) -> float:
    """Return chardet's confidence when it also guesses a GB-family codec."""
    detected = chardet.detect(sample)
    guess = (detected.get("encoding") or "").lower()
    if guess in GB_FAMILY:
        return float(detected.get("confidence") or 0.0)
    return 0.0


def _decode_lossy(raw: bytes, partial: bool) -> DecodedText:
    logger.warning(
        "No legacy codec available for %d bytes; using lossy UTF-8",
        len(raw),
    )
    text = _decode(raw, "utf-8", partial, errors="replace")
    return DecodedText(text=text, encoding="utf-8", confidence=0.0, lossy=True)


def detect_encoding(
    raw: bytes, config: EncodingConfig | None = None, partial: bool = False
) -> DecodedText:
    """Pick a decoding for ``raw`` and return the decoded text.

    Args:
        raw: The raw manuscript bytes.
        config: Fallback codecs and confidence thresholds. Defaults apply
            when omitted.
        partial: ``raw`` is a prefix cut at an arbitrary byte; an incomplete
            trailing multi-byte sequence is ignored rather than rejected.

    Returns:
        The decoded text with the codec used and a confidence in [0, 1].
    """
    config = config or EncodingConfig()

    probes: list[Probe] = [_probe_bom, _probe_utf8]
    probes.extend(
        functools.partial(_probe_legacy, encoding=name, config=config)
        for name in config.fallback_encodings
    )
    probes.append(functools.partial(_probe_legacy_lossy, config=config))

    for probe in probes:
        decoded = probe(raw, partial)
        if decoded is not None:
            logger.debug("Decoded %d bytes as %s", len(raw), decoded.encoding)
            return decoded

    return _decode_lossy(raw, partial)
