"""Scene composition for rendered shorts.

Builds the declarative element list for one short: the background footage,
the narration track and one text overlay per caption group. Elements are
layered in list order, so captions come last and sit on top of the video.
"""

from typing import Optional

from ..config import CaptionStyle
from .base import CaptionGroup, InvalidInput, SceneDescription


class SceneComposer:
    """Turns caption groups and two media URLs into a scene description."""

    def __init__(self, style: Optional[CaptionStyle] = None):
        self.style = style or CaptionStyle()

    def _video_element(self, video_url: str, duration: float) -> dict:
        return {
            "type": "video",
            "src": video_url,
            "duration": duration,
            "scale": {
                "width": self.style.video_scale_width,
                "height": self.style.video_scale_height,
            },
            "y": self.style.video_y,
        }

    def _audio_element(self, audio_url: str) -> dict:
        return {"type": "audio", "src": audio_url}

    def _text_element(self, caption: CaptionGroup) -> dict:
        return {
            "type": "text",
            "text": caption.text,
            "start": caption.start,
            "duration": caption.duration,
            "width": self.style.width,
            "settings": {
                "font-family": self.style.font_family,
                "font-weight": str(self.style.font_weight),
                "font-size": self.style.font_size,
                "font-color": self.style.font_color,
                "text-align": "center",
                "text-shadow": self.style.text_shadow,
            },
        }

    def compose(
        self,
        audio_url: str,
        video_url: str,
        captions: list[CaptionGroup],
    ) -> SceneDescription:
        """Describe one short.

        Args:
            audio_url: Public URL of the narration chunk.
            video_url: Public URL of the background footage.
            captions: Caption groups in display order.

        Returns:
            Scene whose video runs until the last caption ends.

        Raises:
            InvalidInput: If there are no captions to show.
        """
        if not captions:
            raise InvalidInput("Cannot compose a scene without captions")

        video_duration = captions[-1].end
        elements = [
            self._video_element(video_url, video_duration),
            self._audio_element(audio_url),
        ]
        elements.extend(self._text_element(caption) for caption in captions)

        return SceneDescription(
            audio_track=audio_url,
            video_track=video_url,
            captions=list(captions),
            video_duration=video_duration,
            elements=elements,
        )
