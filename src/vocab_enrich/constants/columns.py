"""Vocabulary store column name constants."""

ID = "id"
WORD = "word"
PART_OF_SPEECH = "part_of_speech"
PROFICIENCY_LEVEL = "proficiency_level"
PRIMARY_DEFINITION = "primary_definition"
USAGE_EXAMPLE = "usage_example"

# Enriched fields, in the order they are written back to the store
ENRICHED_COLUMNS = [PART_OF_SPEECH, PROFICIENCY_LEVEL, PRIMARY_DEFINITION, USAGE_EXAMPLE]

VOCAB_COLUMNS = [ID, WORD, *ENRICHED_COLUMNS]
