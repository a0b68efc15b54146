# ai2sql/services/sql_generator.py
# Produces the assistant reply for a chat question. There is no model behind it yet:
# every question is answered with the same canned query.
import logging
from typing import Dict

logger = logging.getLogger(__name__)

ASSISTANT_PREAMBLE = "Here is an SQL query based on your request:"

CANNED_SQL = """SELECT u.id, u.name, u.email, COUNT(o.id) as order_count
FROM users u
LEFT JOIN orders o ON u.id = o.user_id
WHERE u.status = 'active'
GROUP BY u.id, u.name, u.email
ORDER BY order_count DESC;"""


def generate_sql(question: str) -> Dict[str, str]:
    """
    Answer a natural-language question.
    :param question: the user's message
    :return: {"content": assistant text, "sql_query": SQL}
    """
    logger.info(f"Generating SQL for question: {question[:80]}")
    return {"content": ASSISTANT_PREAMBLE, "sql_query": CANNED_SQL}
