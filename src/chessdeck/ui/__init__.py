"""Qt integration — timers, sound effects and the signal bridge.

Submodules are imported directly (``chessdeck.ui.scheduler`` etc.) so that
using the scheduler does not pull in Qt multimedia.
"""
