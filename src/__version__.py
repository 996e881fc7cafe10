"""Version information for the ThreadRest gateway"""

__version__ = "0.3.0"
__version_info__ = (0, 3, 0)
__release_date__ = "2026-10-12"

# Version history
VERSION_HISTORY = [
    {
        "version": "0.3.0",
        "date": "2026-10-12",
        "changes": [
            "Operational dataset PUT accepts hex TLVs (Content-Type: text/plain)",
            "Joiner removal by discerner",
            "Request timeout (408) for responses that never complete",
        ]
    },
    {
        "version": "0.2.0",
        "date": "2026-09-21",
        "changes": [
            "Commissioner and SRP state resources",
            "--show-config prints effective settings",
        ]
    },
    {
        "version": "0.1.0",
        "date": "2026-09-02",
        "changes": [
            "Network diagnostics aggregation over /diagnostics",
            "Node resources on the simulated mesh",
        ]
    },
]


def get_version():
    return __version__
