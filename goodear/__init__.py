"""GoodEar — transcript-synchronized lesson playback.

WHY: Spoken-audio lessons come with transcripts (SRT subtitles or Whisper
JSON) whose fragments are far too fine-grained to navigate by. Listeners
want to replay a lesson in coherent chunks of tens of seconds, step
sentence by sentence, and follow the text as it is spoken.

HOW: Two cooperating halves: segmentation (parse fragments, assemble
sentences, chunk into sections) and playback (a single-threaded state
machine driving an opaque audio transport, plus highlight and progress
tracking). Each stage is independently testable.

RULES:
- All stages exchange the same Segment dataclass
- Segmentation is pure and recomputed on every load
- Playback state is only ever mutated on the dispatcher's thread
"""

__version__ = "0.1.0"
