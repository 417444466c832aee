class HuffmanError(Exception): # base class for every codec failure
    pass


class EmptyAlphabet(HuffmanError):
    def __init__(self, message="no symbols with a positive count to build a tree from"):
        super().__init__(message)


class UnknownSymbol(HuffmanError):
    def __init__(self, symbol):
        self.symbol = symbol # the symbol that has no code
        super().__init__(f"no Huffman code for symbol {symbol}")


class TruncatedStream(HuffmanError, EOFError): # bits ran out before decoding finished
    pass


class MalformedDescription(HuffmanError, ValueError): # tree description is inconsistent
    pass


class InputTooLarge(HuffmanError, ValueError): # symbol count does not fit the 32-bit count field
    pass
