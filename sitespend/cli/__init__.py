"""Unified command-line interface for the sitespend project.

Usage:
    sitespend extract <ocr_json>
    sitespend extract <ocr_json> --format text
    sitespend extract <ocr_json> --draft --debug
"""
