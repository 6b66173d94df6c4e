"""Core segmentation modules.

WHY: The core package is the stable heart of GoodEar: the Segment
dataclass and the pure functions that turn a transcript file into
sentence units and playback sections. Playback, the library and the
HTTP API all consume its output.

HOW: ir.py defines the data structures, parsers.py decodes SRT/JSON,
sentences.py merges fragments into sentences, chunker.py groups units
into sections, highlight.py finds the active span for a position.

RULES:
- Everything here is pure: no I/O except parsers.load_segments()
- Segment is the contract between every stage; change with care
"""
