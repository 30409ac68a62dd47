"""Domain enums for Media Analyzer."""

from enum import Enum


class MediaKind(str, Enum):
    """Coarse media category of an analyzed file.

    When probe data is available the kind is derived from which decoded
    stream types are present, not from the file extension:

    - video + audio -> VIDEO
    - video only    -> IMAGE
    - audio only    -> AUDIO
    - neither       -> UNKNOWN

    Note that a silent video (video stream, no audio stream) is therefore
    labelled IMAGE. This matches the records already stored by earlier
    releases and is kept for compatibility with them.
    """

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"
