"""Decree: a rule-gated decision engine.

A scenario is an ordered list of rules. Each turn the rules whose guards hold
on the current world are sampled by weight into a short list of decisions;
the player's chosen outcome is applied back to the world.
"""

__version__ = "0.1.0"
