# rings

A small toolkit for building long-running applications out of pluggable
modules and services, with a handful of helpers around them.

## Modules

- **`rings.conf`** – layered configuration. `load_settings()` reads
  `config.yml`, then `<run mode>.yml`, then `local.yml` from a config
  directory (later files are merged over earlier ones), then applies every
  `REBT_`-prefixed environment variable as a top-level key (`REBT_NAME`
  sets `name`). `REBT_RUN_MODE` picks the run mode (default `development`)
  and `REBT_CONFIG_PATH` the directory (default `config`).
  `settings()` and `rebit()` load the process-wide settings once; `reset()`
  forgets them. Lookups take dotted keys with optional list indexes
  (`web.main.port`, `items[0]`): `get_string`, `get_bool`, `get_int`,
  `get_float`, `get_table`, `get_array` return the default when the key is
  missing or cannot be converted, and `has` tells whether a key is set.
  `Rebit.from_dict` builds the typed view (`Web`, `Model`, `Backend`,
  `BackendKind`, `Log`) and raises `ValueError` on missing or invalid fields.
- **`rings.erx`** – `Erx`, an exception carrying a `LayoutedC` code of the
  form `app-domain-category-detail`, a message and extra key/value pairs.
  `Erx.to_json` / `Erx.from_string` round-trip it; `Erx.from_parts` builds
  one from a list. Helpers: `smp`, `amp`, and code builders `fuzz_udf`,
  `fuzz`, `common`, `middleware`, `service`, `model`, `action`, `task`.
- **`rings.app`** – `Rings` holds `RingsMod` modules ordered by `level`,
  fires them, records `Moment`s and shuts them down, tracking a `RingState`.
  `make` creates and registers an application (running hooks added with
  `add_invoke_hook`), `instance` finds one by name, and `perform` fires it
  and waits until it has terminated, shutting it down on Ctrl-C.
- **`rings.log`** – `logging_initialize()` installs a stdout handler and a
  daily-rotating file handler according to the `log` section of the
  configuration.
- **`rings.service`** – `Service` subclasses registered at most once per
  name with a `ServiceManager`, or with the process-wide one through
  `register_to_shared`.
- **`rings.balanced`** – `Balanced` hands jobs to `Weighted` resources in
  weighted round-robin order; each resource has a pool of time-limited
  `Concurrent` slots, released again with `Balanced.unlock`.
- **`rings.model`** – `status.Status` values with a text form,
  `sql.Like` patterns, `jsons.RDBMS` JSON SQL fragments for Postgres, MySQL
  and SQLite, and `dbms.ConnectBasic` / `dbms.DBMS` connection strings.
- **`rings.fns`** – `compose`, `memoize`, `with_retry`, `singleton`.
- **`rings.obj`** – `is_default` and `is_empty`.
- **`rings.cargo`** – tidies a Cargo manifest (see below).

## Install

    pip install .

For the test suite:

    pip install ".[test]"
    pytest

## Examples

    from rings.fns import compose, memoize
    from rings.balanced import vector_gcd
    from rings.model.status import Status
    from rings.model.sql import Like
    from rings.model.jsons import RDBMS

    inc_then_double = compose(lambda x: x * 2, lambda x: x + 1)
    inc_then_double(3)                 # 8

    square = memoize(lambda x: x * x)
    square(12)                         # 144, cached afterwards

    vector_gcd([40, 60, 20])           # 20

    status = Status.ok(1000, "waiting")
    str(status)                        # "OK(1000) waiting"
    Status.parse(str(status)) == status

    Like("abc").full()                 # "%abc%"
    RDBMS.MYSQL.extract("name")        # "->>'$.name'"

`Status.ok`, `Status.error` and `Status.parse` raise `Erx` on invalid codes
or text; `Status.from_code` raises `ValueError` for codes outside every
range. Registering a service whose name is already taken raises `Erx`.

## Command line

`rings-cargo` tidies a Cargo manifest: it sorts workspace members and
dependencies, rewrites plain version strings as tables, and points
dependencies that are listed in `workspace.dependencies` at the workspace.

    rings-cargo [MANIFEST] [--dry-run] [--keep-dependencies]

`MANIFEST` defaults to `Cargo.toml`. By default the file is rewritten in
place and dependencies are first moved into `workspace.dependencies`;
`--dry-run` prints the result instead, and `--keep-dependencies` leaves
dependencies where they are.

## What it does not do

The configuration describes web entries and storage backends, but this
package opens no database or Redis connections, runs no HTTP server and has
no job scheduler: `Service.schedules()` only returns a list, and nothing in
the package runs those jobs. It provides no ready-made `RingsMod`
implementations.