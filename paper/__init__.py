"""
Exam Paper Model
paper/

Modules:
1. calculator  — total marks, category, duration and clock arithmetic
2. schemas     — Metadata → Section → Question entities and constants
3. editor      — field setters that keep the attempt-count rules
4. sync        — blueprint → builder transition (question list reconciliation)
5. printing    — read-only PaperView and the print filename
"""
