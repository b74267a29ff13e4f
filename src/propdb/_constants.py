"""Internal constants shared across the library."""

#: Largest text value a single property entry may hold, in UTF-16 code units.
MAX_ENTRY_SIZE = 32767

#: Marks every entry owned by a store so unrelated properties never collide.
INTERNAL_DB_PREFIX = "§▌"

#: Separates the database id from the tag, and a chunked key from its index.
ID_DELIMITER = "_"

ENV_PREFIX = "PROPDB_"
