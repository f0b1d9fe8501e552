import asyncio
import base64
import binascii
import io

import sounddevice as sd
import soundfile as sf


def decode_data_uri(uri: str) -> bytes:
    """Return the bytes embedded in a ``data:<mime>;base64,<payload>`` URI."""
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError(f"Not a base64 data URI: {uri[:40]}")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError("Malformed base64 audio payload") from e


class SoundDeviceAudio:
    """Plays step audio on the default output device."""

    async def play(self, handle: str) -> None:
        """Start playback, then wait until it ends.

        Decoding and device errors are raised before anything is heard, so
        the player treats them as "could not start".
        """
        samples, sample_rate = sf.read(io.BytesIO(decode_data_uri(handle)), dtype="float32")
        sd.play(samples, sample_rate)
        try:
            await asyncio.to_thread(sd.wait)
        except asyncio.CancelledError:
            sd.stop()
            raise
