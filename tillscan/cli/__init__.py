"""Unified command-line interface for tillscan.

Usage:
    tillscan scan <image>
    tillscan scan <image> --engine service --ocr-url http://localhost:8001
    tillscan parse <text_file|->
    tillscan serve [--port]
"""
