"""
NeonDrop Package
================

Core of the NeonDrop falling-block game. Everything that decides what a
player sees and how their keys are interpreted lives here:

- Daily FLOAT sequence (same for every player on the same day)
- Adaptive mercy curve for FLOAT spawning
- Input routing, auto-repeat, and FLOAT diagonal movement

All tunable parameters are in game_config.yaml. Changing anything under
``float`` changes which pieces players receive and invalidates score
comparisons for that day.
"""
