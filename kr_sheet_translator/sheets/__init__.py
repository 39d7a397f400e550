"""Sheet row parsing and the file based RawRow source / write-back adapters."""
