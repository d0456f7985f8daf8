"""
Rockfall Package
================

Falling-piece stacking simulator that reports the stack height after N drops,
for N up to around 10^12.

- sim_core: geometry, shape catalog, well, placement engine, cycle detection
  and height extrapolation
- evaluation: runs a wind tape against one or more drop-count targets

All tunable parameters are in game_config.yaml.
"""
