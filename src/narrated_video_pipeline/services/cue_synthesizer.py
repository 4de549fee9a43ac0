"""Cue synthesizer: turns narration script text into a timed cue track.

Timing is estimated from word counts and an assumed speaking rate; no audio
is analysed. Two rendering strategies are supported:

- word highlight: the script is split into fixed-size lines and every word
  gets its own cue showing the whole line with that word emphasised
- chunked: words are packed into chunks under a character budget and the
  estimated narration duration is shared equally between the chunks
"""

from typing import List, Optional, Union

from ..errors import InvalidInputError
from ..logging_config import LoggerMixin
from ..models import Cue, CueMode, CueTrack


class CueSynthesizer(LoggerMixin):
    """Build cue tracks from scripts. Pure: no clock, no randomness."""

    def __init__(
        self,
        words_per_line: int = 3,
        word_duration: float = 0.35,
        chunk_char_budget: int = 50,
        speaking_rate_wpm: float = 150.0,
    ):
        if words_per_line < 1:
            raise ValueError("words_per_line must be at least 1")
        if word_duration <= 0:
            raise ValueError("word_duration must be positive")
        if chunk_char_budget < 1:
            raise ValueError("chunk_char_budget must be at least 1")
        if speaking_rate_wpm <= 0:
            raise ValueError("speaking_rate_wpm must be positive")

        self.words_per_line = words_per_line
        self.word_duration = word_duration
        self.chunk_char_budget = chunk_char_budget
        self.speaking_rate_wpm = speaking_rate_wpm

    def synthesize(self, script: str, mode: Union[CueMode, str] = CueMode.WORD_HIGHLIGHT) -> CueTrack:
        """
        Convert a script into an ordered cue track.

        Args:
            script: Narration text
            mode: Rendering strategy (enum member or its value)

        Returns:
            Immutable cue track

        Raises:
            InvalidInputError: If the script is empty after trimming or the mode is unknown
        """
        mode = self._resolve_mode(mode)
        words = script.split() if script else []
        if not words:
            raise InvalidInputError("Script is empty", details="script must contain at least one word")

        if mode is CueMode.WORD_HIGHLIGHT:
            cues = self._word_highlight_cues(words)
        else:
            cues = self._chunked_cues(words)

        track = CueTrack(cues=tuple(cues), mode=mode)
        self.logger.debug(
            "Cue track synthesized",
            mode=mode.value,
            word_count=len(words),
            cue_count=len(track),
            duration=f"{track.duration:.2f}s",
        )
        return track

    def estimate_duration(self, word_count: int) -> float:
        """Estimated narration length in seconds for ``word_count`` words."""
        return word_count / self.speaking_rate_wpm * 60

    def split_lines(self, words: List[str]) -> List[List[str]]:
        """Group words into lines of ``words_per_line``."""
        size = self.words_per_line
        return [words[i:i + size] for i in range(0, len(words), size)]

    def pack_chunks(self, words: List[str]) -> List[str]:
        """Greedily pack words into chunks no longer than the character budget.

        A word longer than the budget becomes a chunk of its own.
        """
        chunks: List[str] = []
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if current and len(candidate) > self.chunk_char_budget:
                chunks.append(current)
                current = word
            else:
                current = candidate
        if current:
            chunks.append(current)
        return chunks

    # ---------------------------
    # Strategies
    # ---------------------------

    def _word_highlight_cues(self, words: List[str]) -> List[Cue]:
        cues: List[Cue] = []
        index = 0
        for line in self.split_lines(words):
            text = " ".join(line)
            for position in range(len(line)):
                start = index * self.word_duration
                end = (index + 1) * self.word_duration
                cues.append(Cue(start=start, end=end, text=text, emphasized_word_index=position))
                index += 1
        return cues

    def _chunked_cues(self, words: List[str]) -> List[Cue]:
        chunks = self.pack_chunks(words)
        total = self.estimate_duration(len(words))
        share = total / len(chunks)

        # Shared boundaries keep consecutive cues exactly contiguous
        boundaries = [i * share for i in range(len(chunks))] + [total]
        return [
            Cue(start=boundaries[i], end=boundaries[i + 1], text=chunk)
            for i, chunk in enumerate(chunks)
        ]

    @staticmethod
    def _resolve_mode(mode: Optional[Union[CueMode, str]]) -> CueMode:
        if isinstance(mode, CueMode):
            return mode
        try:
            return CueMode(mode)
        except ValueError as e:
            valid = ", ".join(m.value for m in CueMode)
            raise InvalidInputError(f"Unknown cue mode: {mode}", details=f"mode must be one of: {valid}") from e
