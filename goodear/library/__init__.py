"""Lesson library: persistence, played-section tracking, folder import.

WHY: Listeners import a folder of lessons once and come back to it later,
expecting the app to remember which folder it was and which sections they
already heard.

HOW: store.py provides the key-value persistence collaborator,
progress.py the per-lesson played set, lessons.py folder copy/scan and
lesson loading.
"""
