"""Concrete adapters for the services the pipeline talks to.

- reddit.py        : Post source (AsyncPRAW)
- speech.py        : Text-to-speech (OpenAI)
- slicer.py        : Narration chunking (pydub)
- storage.py       : Asset store (Cloudinary)
- transcription.py : Word timings (Deepgram REST)
- render.py        : Video rendering (JSON2Video REST)
- notifier.py      : Notifications (Discord webhook)
"""

from .notifier import DiscordNotifier
from .reddit import RedditPostSource
from .render import Json2VideoRenderer
from .slicer import PydubAudioSlicer
from .speech import OpenAISpeechSynthesizer, split_text
from .storage import CloudinaryAssetStore
from .transcription import DeepgramTranscriber

__all__ = [
    "CloudinaryAssetStore",
    "DeepgramTranscriber",
    "DiscordNotifier",
    "Json2VideoRenderer",
    "OpenAISpeechSynthesizer",
    "PydubAudioSlicer",
    "RedditPostSource",
    "split_text",
]
