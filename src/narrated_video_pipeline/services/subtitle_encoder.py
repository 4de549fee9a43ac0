"""Subtitle track encoders.

Serialize a cue track into a subtitle file the transcoding engine can burn
into the video. Encoders return bytes and never touch the filesystem.

Formats:
- ASS (default): styles live in the file header, the emphasised word of a
  word-highlight cue is recoloured with an inline override tag
- SRT: plain cues, emphasis expressed with a ``<font color>`` tag and styling
  supplied to the burn-in filter through ``force_style``
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple, Type

from ..errors import EncodingError
from ..logging_config import LoggerMixin
from ..models import Cue
from ..utils.time_utils import format_ass_timestamp, format_srt_timestamp

_HEX_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")

# libass renders SRT input on a 384x288 canvas
_SRT_PLAY_RES_Y = 288

_WORD_JOINER = "\u2060"


@dataclass
class SubtitleStyle:
    """Styling configuration for burned-in subtitles."""

    font_name: str = "Arial"
    font_size: int = 72
    primary_color: str = "FFFFFF"  # hex RRGGBB without #
    highlight_color: str = "FFFF00"  # colour of the emphasised word
    outline_color: str = "000000"
    outline_width: int = 4
    bold: bool = True
    margin_vertical: int = 260  # pixels from bottom on the play canvas
    alignment: int = 2  # numpad layout, 2 = bottom centre
    play_res: Tuple[int, int] = (1080, 1920)  # vertical video canvas

    def __post_init__(self):
        """Validate style configuration."""
        if self.font_size <= 0:
            raise ValueError("Font size must be positive")
        if self.outline_width < 0:
            raise ValueError("Outline width must be non-negative")
        if self.margin_vertical < 0:
            raise ValueError("Margin vertical must be non-negative")
        if not 1 <= self.alignment <= 9:
            raise ValueError("Alignment must be between 1 and 9")
        if self.play_res[0] <= 0 or self.play_res[1] <= 0:
            raise ValueError("Play resolution must be positive")
        for name in ("primary_color", "highlight_color", "outline_color"):
            if not _HEX_COLOR.match(getattr(self, name)):
                raise ValueError(f"{name} must be a RRGGBB hex string")

    @staticmethod
    def ass_color(rgb: str) -> str:
        """Convert RRGGBB into the ASS &HAABBGGRR notation (opaque)."""
        rgb = rgb.upper()
        return f"&H00{rgb[4:6]}{rgb[2:4]}{rgb[0:2]}"

    def to_force_style(self) -> str:
        """Render the ``force_style`` option for the ffmpeg subtitles filter.

        Sizes are scaled from the play canvas to the canvas libass uses for
        SRT input.
        """
        scale = _SRT_PLAY_RES_Y / self.play_res[1]
        parts = [
            f"FontName={self.font_name}",
            f"FontSize={max(1, round(self.font_size * scale))}",
            f"PrimaryColour={self.ass_color(self.primary_color)}",
            f"OutlineColour={self.ass_color(self.outline_color)}",
            f"Outline={self.outline_width * scale:.2f}".rstrip("0").rstrip("."),
            f"Bold={1 if self.bold else 0}",
            f"Alignment={self.alignment}",
            f"MarginV={round(self.margin_vertical * scale)}",
        ]
        return ",".join(parts)


class SubtitleEncoder(LoggerMixin):
    """Base class for subtitle format strategies."""

    name = ""
    extension = ""
    needs_force_style = False

    def encode(self, cues: Iterable[Cue], style: SubtitleStyle) -> bytes:
        """
        Serialize cues into subtitle file bytes.

        Args:
            cues: Cue track (or any ordered iterable of cues)
            style: Styling profile

        Returns:
            Complete subtitle file content, UTF-8 encoded

        Raises:
            EncodingError: If a cue violates the cue invariants
        """
        cue_list = list(cues)
        self.validate(cue_list)
        content = self._render(cue_list, style)
        self.logger.debug("Subtitle track encoded", format=self.name, cues=len(cue_list), size=len(content))
        return content.encode("utf-8")

    @staticmethod
    def validate(cues: Sequence[Cue]) -> None:
        """Check cue invariants independently of how the cues were built."""
        if not cues:
            raise EncodingError("Cannot encode an empty cue track")

        previous_end = 0.0
        for position, cue in enumerate(cues):
            if cue.start < 0:
                raise EncodingError(f"Cue {position} starts before media start ({cue.start})")
            if cue.start >= cue.end:
                raise EncodingError(f"Cue {position} has start {cue.start} >= end {cue.end}")
            if cue.start < previous_end:
                raise EncodingError(f"Cue {position} overlaps the previous cue ({cue.start} < {previous_end})")
            index = cue.emphasized_word_index
            if index is not None and not 0 <= index < len(cue.text.split(" ")):
                raise EncodingError(f"Cue {position} emphasises word {index} outside its text")
            previous_end = cue.end

    def _render(self, cues: List[Cue], style: SubtitleStyle) -> str:
        raise NotImplementedError


class AssEncoder(SubtitleEncoder):
    """Advanced SubStation Alpha encoder."""

    name = "ass"
    extension = ".ass"

    STYLE_FORMAT = (
        "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, "
        "BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, "
        "BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding"
    )
    EVENT_FORMAT = "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text"

    def _render(self, cues: List[Cue], style: SubtitleStyle) -> str:
        width, height = style.play_res
        lines = [
            "[Script Info]",
            "ScriptType: v4.00+",
            f"PlayResX: {width}",
            f"PlayResY: {height}",
            "WrapStyle: 0",
            "ScaledBorderAndShadow: yes",
            "",
            "[V4+ Styles]",
            self.STYLE_FORMAT,
            self._style_line(style),
            "",
            "[Events]",
            self.EVENT_FORMAT,
        ]
        for cue in cues:
            lines.append(
                f"Dialogue: 0,{format_ass_timestamp(cue.start)},{format_ass_timestamp(cue.end)},"
                f"Default,,0,0,0,,{self._cue_text(cue, style)}"
            )
        return "\n".join(lines) + "\n"

    @staticmethod
    def _style_line(style: SubtitleStyle) -> str:
        primary = SubtitleStyle.ass_color(style.primary_color)
        highlight = SubtitleStyle.ass_color(style.highlight_color)
        outline = SubtitleStyle.ass_color(style.outline_color)
        bold = -1 if style.bold else 0
        return (
            f"Style: Default,{style.font_name},{style.font_size},{primary},{highlight},{outline},"
            f"&H00000000,{bold},0,0,0,100,100,0,0,1,{style.outline_width},0,{style.alignment},"
            f"60,60,{style.margin_vertical},1"
        )

    @staticmethod
    def _escape(text: str) -> str:
        # A word joiner after a backslash keeps libass from reading it as a line break escape
        text = text.replace("\\", "\\" + _WORD_JOINER)
        return text.replace("{", "(").replace("}", ")").replace("\r\n", "\n").replace("\n", "\\N")

    def _cue_text(self, cue: Cue, style: SubtitleStyle) -> str:
        if cue.emphasized_word_index is None:
            return self._escape(cue.text)
        color = SubtitleStyle.ass_color(style.highlight_color)
        words = [self._escape(word) for word in cue.text.split(" ")]
        index = cue.emphasized_word_index
        words[index] = f"{{\\c{color}&}}{words[index]}{{\\r}}"
        return " ".join(words)


class SrtEncoder(SubtitleEncoder):
    """SubRip encoder."""

    name = "srt"
    extension = ".srt"
    needs_force_style = True

    def _render(self, cues: List[Cue], style: SubtitleStyle) -> str:
        blocks = []
        for number, cue in enumerate(cues, start=1):
            blocks.append(
                f"{number}\n"
                f"{format_srt_timestamp(cue.start)} --> {format_srt_timestamp(cue.end)}\n"
                f"{self._cue_text(cue, style)}\n"
            )
        return "\n".join(blocks)

    @staticmethod
    def _cue_text(cue: Cue, style: SubtitleStyle) -> str:
        text = cue.text.replace("\r\n", "\n")
        if cue.emphasized_word_index is None:
            return text
        words = text.split(" ")
        index = cue.emphasized_word_index
        words[index] = f'<font color="#{style.highlight_color.upper()}">{words[index]}</font>'
        return " ".join(words)


ENCODERS: Dict[str, Type[SubtitleEncoder]] = {
    AssEncoder.name: AssEncoder,
    SrtEncoder.name: SrtEncoder,
}


def get_encoder(name: str) -> SubtitleEncoder:
    """Resolve a subtitle encoder by format name."""
    try:
        return ENCODERS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown subtitle format: {name} (expected one of {', '.join(ENCODERS)})") from None
