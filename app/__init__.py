"""Audio Sprite Application

This package builds audio sprites: one audio track holding many short
clips, exported to several formats, plus a JSON manifest describing where
each clip starts and ends.

The application consists of:
- A FastAPI app serving sprites built from the media directory (main.py)
- A command line front-end (cli.py)
- The audio sprite build pipeline (audiosprite)
"""
