"""
rvelf Parsers
==============

One module per decoding stage of the ELF64 pipeline: endian codec,
identification block, file header, program headers, section headers,
and string tables.  Each stage is a plain function of the input buffer
and the previous stage's output.
"""
