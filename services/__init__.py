"""
alpacabridge services package

Device-kind clients layered on the alpacabridge core:

- services.alpaca: telescope, camera, focuser, filter wheel and safety
  monitor clients over the ASCOM Alpaca protocol
"""
