from sqlchat.llm.validator import SQLValidator

def test_validator_accepts_safe_select():
    validator = SQLValidator()

    sql = "SELECT * FROM public.orders LIMIT 10;"
    is_valid, error = validator.validate(sql)

    assert is_valid is True
    assert error is None

def test_validator_accepts_cte():
    validator = SQLValidator()

    sql = "WITH totals AS (SELECT customer_id, SUM(quantity) AS qty FROM orders GROUP BY customer_id) SELECT * FROM totals;"
    is_valid, error = validator.validate(sql)

    assert is_valid is True

def test_validator_ignores_keywords_inside_literals():
    validator = SQLValidator()

    is_valid, error = validator.validate("SELECT id FROM audit WHERE action = 'DELETE';")

    assert is_valid is True

def test_validator_rejects_insert():
    validator = SQLValidator()

    sql = "INSERT INTO orders (id) VALUES (1);"
    is_valid, error = validator.validate(sql)

    assert is_valid is False
    assert "INSERT" in error

def test_validator_rejects_delete():
    validator = SQLValidator()

    sql = "DELETE FROM orders WHERE id=1;"
    is_valid, error = validator.validate(sql)

    assert is_valid is False
    assert "DELETE" in error

def test_validator_rejects_drop():
    validator = SQLValidator()

    sql = "DROP TABLE orders;"
    is_valid, error = validator.validate(sql)

    assert is_valid is False
    assert "DROP" in error

def test_validator_rejects_multiple_statements():
    validator = SQLValidator()

    sql = "SELECT * FROM orders; SELECT * FROM users;"
    is_valid, error = validator.validate(sql)

    assert is_valid is False
    assert "Multiple" in error

def test_validator_strips_comments_before_checking():
    validator = SQLValidator()

    assert validator.validate("-- top customers\nSELECT name FROM customers;")[0] is True
    assert validator.validate("SELECT 1; /* hidden */ DROP TABLE orders")[0] is False

def test_validator_rejects_non_select():
    validator = SQLValidator()

    is_valid, error = validator.validate("SHOW TABLES")

    assert is_valid is False
    assert "Only read-only" in error

def test_validator_rejects_empty():
    is_valid, error = SQLValidator().validate("   ")

    assert is_valid is False
    assert "empty" in error

def test_validator_policy_can_be_disabled():
    validator = SQLValidator(read_only=False)

    is_valid, error = validator.validate("DELETE FROM orders WHERE id=1;")

    assert is_valid is True
    assert error is None

def test_validator_accepts_parenthesised_union():
    validator = SQLValidator()

    is_valid, error = validator.validate("(SELECT id FROM orders) UNION (SELECT id FROM customers);")

    assert is_valid is True
    assert error is None

def test_validator_rejects_parenthesised_non_select():
    validator = SQLValidator()

    is_valid, error = validator.validate("(VALUES (1, 2));")

    assert is_valid is False
    assert "UNKNOWN" in error
