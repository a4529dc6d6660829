##
# .encodings - encoding names and bytea text
##
