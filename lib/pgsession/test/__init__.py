##
# .test - unittest modules for pgsession
##
