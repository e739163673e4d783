# syscleaner

A system cleaner that frees disk space by removing temporary files, browser
and application caches, log files, crash dumps, old prefetch data and
thumbnail caches.

Most cleaning categories target Windows locations (`%WINDIR%`,
`%LOCALAPPDATA%`, `%APPDATA%`, `%ProgramData%`, `%USERPROFILE%`). On other
systems those categories do nothing; the user temp category still cleans the
directories named by the `TEMP` and `TMP` environment variables.

The package has no dependencies outside the standard library. The graphical
window uses Tk (`tkinter`).

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Preview what would be removed, without deleting anything:

```
syscleaner clean --all --dry-run
```

Clean everything:

```
syscleaner clean --all
```

Run without a subcommand, `syscleaner` prints its help.

Group flags select whole sets of categories:

| Flag         | Categories                                                      |
|--------------|-----------------------------------------------------------------|
| `--all`      | everything below                                                |
| `--system`   | Windows and user temp folders, update and installer caches, prefetch, crash dumps, error reports, thumbnail/icon/font/shader caches, DNS cache, Windows logs, event logs, delivery optimization, recycle bin |
| `--browsers` | Chrome, Firefox, Edge, Brave, Opera caches                      |
| `--apps`     | Discord, Spotify, Steam, Teams, VS Code, Java caches            |

Individual categories: `--win-temp`, `--user-temp`, `--wupdate`,
`--installer`, `--prefetch`, `--crashdumps`, `--wer`, `--thumbcache`,
`--iconcache`, `--fontcache`, `--shadercache`, `--dnscache`, `--winlogs`,
`--eventlogs`, `--deliveryopt`, `--recyclebin`, `--chrome`, `--firefox`,
`--edge`, `--brave`, `--opera`, `--discord`, `--spotify`, `--steam`,
`--teams`, `--vscode`, `--java`.

Every flag may be given alone (meaning true) or with a value (`1`, `t`,
`true`, `0`, `f`, `false`, ...). A category flag given explicitly overrides
its group, so a category can be left out of a group:

```
syscleaner clean --browsers --user-temp
syscleaner clean --all --recyclebin=false
syscleaner clean --help
```

If no category ends up selected, the command prints a short hint about the
group flags and stops. Otherwise it prints a summary: files deleted and
skipped, space freed, time taken, and the counts of files that were in use,
of permission errors and of other errors.

Notes:

- Prefetch data and Windows log files are only removed when older than 30 days.
- Flushing the DNS cache (`ipconfig /flushdns`), clearing the System and
  Application event logs (`wevtutil`) and emptying the recycle bin
  (PowerShell `Clear-RecycleBin`) run system tools and are skipped in a dry run.
- Files that are locked or cannot be accessed are counted and skipped rather
  than stopping the run.
- Categories run up to four at a time. Each directory is given 30 seconds,
  each file removal 2 seconds, and the whole run 5 minutes; what times out is
  reported as an error.

## Graphical interface

```
syscleaner-gui
```

opens a window with a check box for every category, grouped into System,
Browsers and Applications, each group with "Select All" and "Deselect All".
"Analyze (Preview)" performs a dry run and reports how much space could be
reclaimed; "Clean Now" removes the files and reports what was removed,
skipped or failed. If Tk cannot be started, the command prints a message and
exits with status 1.

## Library use

```python
from syscleaner.categories import CleanOptions, perform_clean
from syscleaner.results import format_bytes

result = perform_clean(CleanOptions(user_temp=True, dry_run=True))
print(result.files_deleted, format_bytes(result.space_freed))
```

- `syscleaner.categories`: `CleanOptions` (one boolean per category, plus
  `dry_run` and an optional `progress(label, current, total)` callback),
  `perform_clean`, `clean_chromium_profiles`, `dedup`.
- `syscleaner.results`: `CleanResult` and its `merge`, `CleanError`,
  `ErrorType`, `classify_error`, `clean_directory`, `remove_with_timeout`,
  `format_bytes`.
- `syscleaner.admin`: `is_elevated()` and `require_elevation(operation)`,
  which raises `ElevationError` when not running as administrator (root on
  POSIX).
- `syscleaner.gui.clean_panel`: `CleanPanel`, `default_selection`,
  `build_options`, `format_analysis`, `format_clean_result`.
- `syscleaner.gui.score_ring`: `ScoreRing`, an animation model that steps a
  shown value towards a 0–100 score, with `clamp_score`, `color_for_score`
  and a Tk `ScoreRingWidget`. The cleaning window does not use it.

## What it does not do

This package only cleans. It has no gaming or performance modes, does not
stop services or change power plans, does not optimise startup programs,
network or disk settings, does not manage process priorities, and has no
dashboard or live system monitor.