# ftdc

Building blocks for working with FTDC-style metrics data in Python. The
package depends on `pymongo` for its `bson` module.

| Module | What it provides |
| --- | --- |
| `ftdc.catcher` | `Catcher` collects errors for continue-on-error work. `CatcherError` is the error it creates and raises. |
| `ftdc.encoding` | Varints, deltas, size-prefixed zlib payloads, float and time normalisation, and `is_num`. |
| `ftdc.sampledocs` | Sample metric documents, and helpers that list the metric keys in a document. |
| `ftdc.snapshot` | `Snapshot` is a serialisable view of a histogram, in BSON and JSON. |
| `ftdc.hdrhist` | `Histogram` is an HDR histogram with bounded relative precision. This module also holds `Bracket`, `Bar` and the import helpers. |
| `ftdc.window` | `WindowedHistogram` rotates through several histograms to give windowed statistics. |

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Histograms

```python
from ftdc.hdrhist import Histogram, import_snapshot, histogram_from_bson

hist = Histogram(1, 10_000_000, 3)
for value in range(1_000_000):
    hist.record_value(value)

hist.value_at_quantile(50)   # 500223
hist.max()                   # 1000447
hist.min()                   # 0
hist.mean()
hist.std_dev()
hist.total_count()           # 1000000

snapshot = hist.export()
assert import_snapshot(snapshot) == hist

data = hist.to_bson()        # also: to_json(), to_document()
assert histogram_from_bson(data) == hist
```

`Histogram(min_value, max_value, sigfigs)` raises `ValueError` unless
`sigfigs` is between 1 and 5.

`record_value` and `record_values(value, n)` raise `ValueError` for a value
the histogram cannot track.

`record_corrected_value(value, expected_interval)` also records the values
that a stall in recording would have hidden.

`merge(other)` adds another histogram's values to this one. It returns the
number of values it had to drop.

`cumulative_distribution()` returns a list of `Bracket(quantile, count,
value_at)`. `distribution()` returns a list of `Bar(start, end, count)`.
`str(bar)` gives a CSV line.

The settings a histogram was built with are available as the properties
`lowest_trackable_value`, `highest_trackable_value` and
`significant_figures`. `byte_size()` estimates the memory it uses.

`Snapshot` holds `lowest_trackable_value`, `highest_trackable_value`,
`significant_figures` and `counts`. In BSON and JSON these fields are named
`lowest`, `highest`, `figures` and `counts`.

`Snapshot.from_bson` and `Snapshot.from_json` raise `ValueError` on
malformed input. So do `histogram_from_bson` and `histogram_from_json`.

## Windowed histograms

```python
from ftdc.window import WindowedHistogram

window = WindowedHistogram(2, 1, 1000, 3)
for value in range(100):
    window.current.record_value(value)
window.rotate()
for value in range(100, 200):
    window.current.record_value(value)
window.rotate()              # drops the oldest section
for value in range(200, 300):
    window.current.record_value(value)

window.merge().value_at_quantile(50)   # 199
```

`merge()` refills and returns the same histogram object on every call.

## Collecting errors

```python
from ftdc.catcher import Catcher, CatcherError

interval = 0
catcher = Catcher()
catcher.add(None)                                   # ignored
catcher.new_when(interval < 1, "interval must be positive")
catcher.errorf("%s is invalid", "value")
catcher.wrap(OSError("disk full"), "writing output")
len(catcher)                                        # 3

try:
    catcher.resolve()
except CatcherError as exc:
    print(exc)           # the messages, one per line
    print(exc.errors)    # the collected exceptions
```

These methods each take a condition first and do nothing when it is false:
`add_when`, `extend_when`, `new_when`, `errorf_when` and `check_when`.

`check(fn)` calls `fn` and records any exception it raises. It also records
any exception object that `fn` returns.

## Encoding helpers

```python
import io
from ftdc.encoding import (
    compress_buffer, encode_value, normalize_float, read_uvarint,
    restore_float, undelta,
)

read_uvarint(io.BytesIO(encode_value(300)))  # 300
undelta(10, [1, 2, 3])                       # [10, 11, 13, 16]
restore_float(normalize_float(42.42))        # 42.42
compress_buffer(b"payload")                  # 4-byte little-endian length + zlib data
```

`encode_value` writes a negative number as the varint of its 64-bit two's
complement.

`read_uvarint` raises `EOFError` when the stream ends before a value is
complete. It raises `ValueError` when a value overflows 64 bits.

`epoch_ms` and `time_from_epoch_ms` convert between datetimes and
milliseconds since the Unix epoch, in UTC.

`is_num(num, value)` is true when `value` is an integer or float equal to
`num`. It is false for booleans and for anything else.

## Sample documents

`create_event_record`, `rand_flat_document`,
`rand_flat_document_with_floats` and `rand_complex_document` build
dictionaries of BSON-ready values.

`is_metrics_value(key, value)` returns the list of metric keys a value
contributes, together with a count. `is_metrics_document` and
`is_metrics_array` do the same for a document or an array. In the count,
booleans, numbers and datetimes count once and timestamps count twice.
Other values count for nothing.

## What this package does not do

This package provides the pieces listed above and nothing more. It does not
read or write FTDC chunk files, and it has no metric collectors and no
iterators over recorded samples. It does not collect system or runtime
metrics, does not convert JSON streams, and has no command-line tool.