from hexcalc.lexer import Word, tokenize, string_value


def kinds_and_texts(words):
    return [(w.kind, w.text) for w in words]


def test_prefixed_numbers_keep_their_base():
    words = tokenize('0x1A + 0b101 + 42 + 2.5')
    assert words[0] == Word('number', '0x1A', 0, 16)
    assert words[2] == Word('number', '0b101', 7, 2)
    assert words[4] == Word('number', '42', 15, 10)
    assert words[6] == Word('number', '2.5', 20, 10)


def test_multi_character_operators_are_greedy():
    words = tokenize('1<<2>=3**4&&a||b!=c->d')
    assert [w.text for w in words if w.kind == 'operator'] == ['<<', '>=', '**', '&&', '||', '!=', '->']


def test_identifiers_and_punctuation():
    words = tokenize('max(_a1, b)')
    assert kinds_and_texts(words) == [
        ('identifier', 'max'),
        ('punctuation', '('),
        ('identifier', '_a1'),
        ('punctuation', ','),
        ('identifier', 'b'),
        ('punctuation', ')'),
    ]


def test_string_literal_escapes():
    words = tokenize(r'"say \"hi\" \\ now"')
    assert len(words) == 1
    assert words[0].kind == 'string'
    assert string_value(words[0]) == 'say "hi" \\ now'


def test_unknown_characters_never_stop_tokenizing():
    assert kinds_and_texts(tokenize('1 $ 2')) == [
        ('number', '1'), ('punctuation', '$'), ('number', '2'),
    ]
    # an unterminated quote degrades to punctuation
    assert kinds_and_texts(tokenize('"abc')) == [('punctuation', '"'), ('identifier', 'abc')]
    assert kinds_and_texts(tokenize('1.5.2')) == [
        ('number', '1.5'), ('punctuation', '.'), ('number', '2'),
    ]


def test_whitespace_only_input_is_empty():
    assert tokenize('   \t ') == []
    assert tokenize('') == []


def test_reconstructed_source_keeps_every_literal():
    source = 'x   =0x1F+3.25*( y-0b101 )  + "a b"'
    words = tokenize(source)
    rebuilt = ' '.join(w.text for w in words)
    again = tokenize(rebuilt)
    assert [(w.kind, w.text, w.base) for w in again] == [(w.kind, w.text, w.base) for w in words]
