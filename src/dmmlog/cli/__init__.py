"""
Command-line interface for dmmlog.

The CLI is built using the Click framework (with click-option-group for
grouped help output).

Examples
--------
Logging 100 DC voltage readings (10 V range) every half second:
```bash
$ dmmlog log --interval 0.5 -n 100 -U 10 192.168.1.50 volts.csv
```

Printing the instrument identification:
```bash
$ dmmlog ident 192.168.1.50
```

CLI Tree
--------

```
$ dmmlog --tree
cli
└── ident
└── log
```
"""

from .base import cli, tree_option
from .run import log

cli.add_command(log)

__all__ = ["cli", "tree_option"]
