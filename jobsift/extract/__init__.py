"""
Extraction layer for jobsift.

Provides:
- Accumulator: lock-guarded field -> fragments store
- CompletionBarrier: counting wait gate between extraction and assembly
- FieldExtractor: schema-driven crawler callbacks
- assemble_records: balance check and positional zip into records
"""

from jobsift.extract.accumulator import Accumulator
from jobsift.extract.assemble import assemble_records, check_balance
from jobsift.extract.barrier import CompletionBarrier
from jobsift.extract.fields import FieldExtractor

__all__ = [
    "Accumulator",
    "CompletionBarrier",
    "FieldExtractor",
    "assemble_records",
    "check_balance",
]
