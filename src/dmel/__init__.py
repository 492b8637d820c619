"""
Decision Model Expression Language (DMEL) Package

Translates model expressions written in the embedded mini-language into
source text for external statistical environments (R, Python), and
provides the native table/spline/distribution runtime the generated code
must reproduce.

ARCHITECTURAL GUARANTEE:
------------------------
The translator is target-agnostic. Everything a target language needs
(names, argument rewrites, literal syntax, runtime helper source) lives in
a Backend Profile under `dmel.backends`.

Adding a target means adding a profile, never touching the translator.
"""

__version__ = "0.1.0"
