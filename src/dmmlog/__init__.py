# -*- coding: utf-8 -*-
"""# dmmlog

`Digital MultiMeter LOGger`

Samples a network-attached (LXI/SCPI) multimeter at a fixed cadence and writes
every reading as a timestamped CSV line, annotated with timing information:

- `moment`: seconds since the first sample of the run
- `delay`: how late the sample was taken compared to its ideal instant
- `latency`: how long the request/response exchange with the instrument took

The package is organised as:

- [device](dmmlog/device/index.html): SCPI transport and command generation.
- [meas](dmmlog/meas/index.html): the sampling scheduler and sample pipeline.
- [types](dmmlog/types/index.html): configuration, records, protocols and errors.
- [util](dmmlog/util/index.html): logging, CSV output, progress and clocks.
- [cli](dmmlog/cli/index.html): the `dmmlog` command line tool.

Quick start
-----------
```bash
$ dmmlog log --interval 0.5 -n 100 -U 10 192.168.1.50 voltage.csv
```
"""

from ._version import __version__
