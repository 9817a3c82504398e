"""Starter .gitpanel.toml template."""

DEFAULT_TOML = """\
# gitpanel configuration
version = "1.0"

[git]
binary = "git"
timeout = 30.0            # seconds before a git command is killed

[status]
keep_unknown_codes = false    # show unmapped status codes as "unknown"
strip_rename_score = false    # strip the "R100 " score from renamed paths

[watcher]
debounce = 1.0            # seconds of quiet before a refresh is triggered
latency = 1.0             # seconds over which raw events are batched
resume_delay = 0.5        # seconds to stay paused after a refresh

[output]
format = "terminal"       # terminal | json | yaml
show_summary = true
"""
