from dataclasses import dataclass, field


@dataclass
class Step:
    """One narration + board unit of a teaching turn.

    The wire form uses the camelCase keys ``spokenText``, ``boardLines`` and
    ``audio`` on both the server and the client.
    """

    spoken_text: str = ""
    board_lines: list[str] = field(default_factory=list)
    audio: str | None = None  # data: URI, None when there is no narration

    @classmethod
    def from_payload(cls, payload: dict) -> "Step":
        spoken = payload.get("spokenText")
        lines = payload.get("boardLines")
        audio = payload.get("audio")
        return cls(
            spoken_text=spoken if isinstance(spoken, str) else "",
            board_lines=(
                [line for line in lines if isinstance(line, str)]
                if isinstance(lines, list)
                else []
            ),
            audio=audio if isinstance(audio, str) and audio else None,
        )

    def to_payload(self) -> dict:
        return {
            "spokenText": self.spoken_text,
            "boardLines": list(self.board_lines),
            "audio": self.audio,
        }
