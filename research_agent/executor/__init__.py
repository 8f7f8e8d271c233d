"""Execution layer for the research workflow.

Runs the four research phases against a TextGenerator, threading each
phase's output into later prompts, reporting progress and persisting history.

Architecture (bottom-up):
- schemas: Session, phase request, artifact and history records
- db: SQLite/Postgres connection and schema management
- history_store: Settings and capped analysis history
- progress: Per-run progress and completion callbacks
- phase_runner: Runs a single phase (one completion call)
- pipeline: Sequential four-phase run plus artifact assembly
- job_manager: Background jobs, progress polling, cancellation
"""
