"""Constants and mappings for the PGC scoring engine."""

# Positions that take a golfer out of the tournament
TERMINAL_POSITIONS = ('CUT', 'WD', 'DQ')

# Additional terminal codes seen in the live feed
FINISHED_FEED_CODES = ('WD', 'DQ', 'CUT', 'MC', 'MDF', 'DNS', 'DNF')

# Round field names on a golfer snapshot / team result, keyed by round number
ROUND_FIELDS = {
    1: 'round_one',
    2: 'round_two',
    3: 'round_three',
    4: 'round_four',
}

TEE_TIME_FIELDS = {
    1: 'round_one_tee_time',
    2: 'round_two_tee_time',
    3: 'round_three_tee_time',
    4: 'round_four_tee_time',
}

# Round lifecycle states
ROUND_COMPLETED = 'completed'
ROUND_ACTIVE = 'active'
ROUND_UPCOMING = 'upcoming'
ROUND_CUT = 'cut'

# Tournament round markers
PRE_TOURNAMENT_ROUND = 0
FINAL_ROUND = 4
TOURNAMENT_FINISHED = 5

HOLES_PER_ROUND = 18

NUM_GROUPS = 5

# Words that carry no identity when comparing event names
EVENT_STOP_WORDS = frozenset({
    'the',
    'a',
    'an',
    'and',
    'of',
    'at',
    'in',
    'on',
    'for',
    'to',
    'by',
    'presented',
    'championship',
    'tournament',
    'cup',
    'classic',
})

CUT_POSITION = 'CUT'

DATAGOLF_BASE_URL = 'https://feeds.datagolf.com'
DATAGOLF_API_KEY_ENV = 'DATAGOLF_API_KEY'
