"""
Dino Runner
===========

A continuously scrolling obstacle-avoidance game: the player's runner stays
in place while cacti scroll in from the right, and a jump has to clear each
one. This package contains:

- runner_core: the per-frame simulation (actor physics, obstacle field,
  collision, difficulty, scoring, session state machine) and its
  collaborators (backend client, session reporting, local profile, renderer)
- evaluation: headless multi-seed runs with a scripted player

Tunable parameters live in game_config.yaml next to this file.
"""
