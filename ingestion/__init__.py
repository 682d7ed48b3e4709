"""
Batch ETL pipeline components for the transaction, interest account and
annual ledger input files.

Modules:
    date_parser: Multi-format date parsing and range checks
    validation: Shared validation predicates, synonym tables and text helpers
    error_sink: Per-entity error CSV writer
    policies: Skip classification and retry helper
    entities: Registry tying each entity to its file, reader, processor and model
    runner: Chunked pipeline driver and step start bookkeeping
    job_selector: Runs the pipelines for the input files that exist

Subpackages:
    extractors: pandas-based delimited file tokenizer
    readers: Syntactic line-to-record mapping per entity
    transformers: Semantic validation and normalization per entity
    loaders: Chunk persistence through SQLAlchemy

Architecture:
    Each line flows through

    1. Tokenizer - split the line into named raw strings
    2. Reader - build a typed record or a RejectedLine
    3. Processor - validate business rules, normalize, or filter
    4. Loader - save the accepted records of a chunk in one commit

    Rejections at any stage go to the entity's error file; only storage
    failures or too many skipped items stop a pipeline.

Usage:
    from ingestion.job_selector import JobSelector

Example:
    selector = JobSelector(session_factory, settings)
    summary = await selector.run_available()

    for name, execution in summary.executions.items():
        print(name, execution.status, execution.write_count)
"""

__all__ = [
    "DateParser",
    "ValidationUtils",
    "ErrorSink",
    "DelimitedFileReader",
    "ChunkedPipelineRunner",
    "StepRegistry",
    "RecordLoader",
    "JobSelector",
]
