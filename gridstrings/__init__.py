"""
gridstrings — a 3×3 grid of touchable "strings" over a viewport.

Touches near a grid line resolve to one of twelve strings, play that
string's sample (cutting off the previous one) and shake the line.

Modules:
  config          — Constants and environment overrides
  models          — Vec2, Segment, GridString table, SoundBank, events
  layout          — Twelve string segments from viewport geometry
  hit_test        — Touch point → string index
  audio_engine    — Playback sinks and the one-sample dispatcher
  animation       — Idle wobble + touch vibration offset layers
  instrument      — Wires layout, hit testing, playback and animation
  drawing         — OpenCV overlay rendering
  touch_server    — WebSocket touch input
  main            — Preview window entry point
"""
