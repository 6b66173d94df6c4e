"""Synchronized playback: transport interface, dispatcher, engine, session.

WHY: Playback must stay in lock-step with the sections produced by the
core. The audio device is an external collaborator, so this package
talks to it only through the AudioTransport interface and marshals all
of its timer callbacks onto one logical thread.

HOW: transport.py defines the interface (plus a simulated clock for
tests and dry runs), dispatch.py the single-thread callback queue,
engine.py the state machine, session.py the wiring to progress tracking.

RULES:
- Engine state is only touched from the thread that drains the dispatcher
- Every observer registered with a transport is removed on close()
"""
