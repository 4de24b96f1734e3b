"""
Interface package: text front ends for the game.

Modules:
    console — Line-based command protocol for terminals and scripts.
              Reads commands from stdin, writes boards to stdout.
              Can be run as a standalone script: python interface/console.py
"""
