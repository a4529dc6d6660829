##
# .encodings.aliases
##
"""
Module for identifying PostgreSQL client encodings.

PostgreSQL refers to an encoding both by number and by name. This module maps
between the two and, for each, to the Python codec that reads and writes text
in that encoding.

These are **not** installed in Python's aliases. Rather, `get_python_name`
should be used directly.

URLs of interest:
 * http://docs.python.org/library/codecs.html
 * http://git.postgresql.org/gitweb?p=postgresql.git;a=blob;f=src/common/encnames.c
"""

##
#: Canonical PostgreSQL encoding names, indexed by their numeric identifier.
encoding_names = (
	'SQL_ASCII',
	'EUC_JP',
	'EUC_CN',
	'EUC_KR',
	'EUC_TW',
	'EUC_JIS_2004',
	'UTF8',
	'MULE_INTERNAL',
	'LATIN1',
	'LATIN2',
	'LATIN3',
	'LATIN4',
	'LATIN5',
	'LATIN6',
	'LATIN7',
	'LATIN8',
	'LATIN9',
	'LATIN10',
	'WIN1256',
	'WIN1258',
	'WIN866',
	'WIN874',
	'KOI8R',
	'WIN1251',
	'WIN1252',
	'ISO_8859_5',
	'ISO_8859_6',
	'ISO_8859_7',
	'ISO_8859_8',
	'WIN1250',
	'WIN1253',
	'WIN1254',
	'WIN1255',
	'WIN1257',
	'KOI8U',
	'SJIS',
	'BIG5',
	'GBK',
	'UHC',
	'GB18030',
	'JOHAB',
	'SHIFT_JIS_2004',
)

#: Canonical name to numeric identifier.
name_to_id = {name : i for i, name in enumerate(encoding_names)}

#: Other spellings the server accepts for the same encodings.
postgres_aliases = {
	'unicode' : 'UTF8',
	'utf_8' : 'UTF8',
	'utf-8' : 'UTF8',
	'iso_8859_1' : 'LATIN1',
	'iso_8859_2' : 'LATIN2',
	'iso_8859_3' : 'LATIN3',
	'iso_8859_4' : 'LATIN4',
	'iso_8859_9' : 'LATIN5',
	'iso_8859_10' : 'LATIN6',
	'iso_8859_13' : 'LATIN7',
	'iso_8859_14' : 'LATIN8',
	'iso_8859_15' : 'LATIN9',
	'iso_8859_16' : 'LATIN10',
	'shiftjis' : 'SJIS',
	'mskanji' : 'SJIS',
	'alt' : 'WIN866',
	'abc' : 'WIN1258',
	'tcvn' : 'WIN1258',
	'tcvn5712' : 'WIN1258',
	'vscii' : 'WIN1258',
	'koi8' : 'KOI8R',
	'win' : 'WIN1251',
	'windows949' : 'UHC',
	'windows950' : 'BIG5',
	'windows936' : 'GBK',
}

##
#: Dictionary of Postgres encoding names to Python encoding names.
#: This mapping only contains those encoding names that do not intersect.
postgres_to_python = {
	'utf8' : 'utf_8',
	'sql_ascii' : 'ascii',
	'euc_jp' : 'eucjp',
	'euc_cn' : 'euccn',
	'euc_kr' : 'euckr',
	'euc_jis_2004' : 'euc_jis_2004',
	'shift_jis_2004' : 'shift_jis_2004',
	'sjis' : 'shift_jis',
	'latin1' : 'latin_1',
	'latin2' : 'iso8859_2',
	'latin3' : 'iso8859_3',
	'latin4' : 'iso8859_4',
	'latin5' : 'iso8859_9',
	'latin6' : 'iso8859_10',
	'latin7' : 'iso8859_13',
	'latin8' : 'iso8859_14',
	'latin9' : 'iso8859_15',
	'latin10' : 'iso8859_16',
	'koi8r' : 'koi8_r',
	'koi8u' : 'koi8_u',
	'uhc' : 'cp949',
	'johab' : 'johab',
	'gb18030' : 'gb18030',
	'gbk' : 'gbk',
	'big5' : 'big5',
#	'euc_tw' : None, # N/A
#	'mule_internal' : None, # N/A
}

def canonical_name(encname):
	"""
	Return the canonical PostgreSQL spelling of `encname`, or `None` if the
	name does not identify an encoding.
	"""
	if not encname:
		return None
	upper = encname.upper()
	if upper in name_to_id:
		return upper
	return postgres_aliases.get(encname.lower())

def name_encoding(encoding_id):
	"""
	Return the canonical name of the numeric encoding identifier.

	Raises `ValueError` for an identifier the module does not know.
	"""
	if 0 <= encoding_id < len(encoding_names):
		return encoding_names[encoding_id]
	raise ValueError("unknown encoding id " + repr(encoding_id))

def encoding_id(encname):
	"""
	Return the numeric identifier of the named encoding, or -1 when the name
	does not identify an encoding.
	"""
	name = canonical_name(encname)
	if name is None:
		return -1
	return name_to_id[name]

def get_python_name(encname):
	"""
	Lookup the name in the `postgres_to_python` dictionary. If no match is
	found, check for a 'win' or 'windows-' name and convert that to a 'cp###'
	name.

	Returns the lowered `encname` itself if there is no alias for it.

	The win[0-9]+ and windows-[0-9]+ entries are handled functionally.
	"""
	encname = (canonical_name(encname) or encname).lower()
	# check the dictionary first
	localname = postgres_to_python.get(encname)
	if localname is not None:
		return localname
	# no explicit mapping, check for functional transformation
	if encname.startswith('win'):
		# handle win#### and windows-####
		# remove the trailing CP number
		bare = encname.rstrip('0123456789')
		if bare.strip('_-') in ('win', 'windows'):
			return 'cp' + encname[len(bare):]
	return encname
