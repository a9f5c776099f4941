"""Test package for the attention screening game.

Core tests drive the timing engine with a fake millisecond clock, so no
test sleeps. UI smoke tests run headlessly using pygame's dummy video
driver. To run these tests, execute ``pytest`` from the project root.
"""
