from prometheus_client import Counter

derivation_counter = Counter(
    "prstate_num_derivations",
    "Number of PR state derivations by result type",
    labelnames=["result"],
)

file_fetch_counter = Counter(
    "prstate_num_file_fetches",
    "Number of file contents requested by the derivation",
    labelnames=["purpose"],
)

owner_parse_error_counter = Counter(
    "prstate_num_owner_parse_errors",
    "Number of package headers that failed to parse",
)

api_call_count = Counter(
    "prstate_num_api_calls",
    "Total number of external API calls",
    labelnames=["service"],
)
