from __future__ import annotations


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS tickets (
            number int PRIMARY KEY CHECK (number > 0),
            sold boolean NOT NULL DEFAULT false,
            buyer text,
            sold_at timestamptz,
            CONSTRAINT tickets_sale_consistent CHECK (
                (sold AND buyer IS NOT NULL AND buyer <> '' AND sold_at IS NOT NULL)
                OR (NOT sold AND buyer IS NULL AND sold_at IS NULL)
            )
        );
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS tickets_buyer_idx ON tickets (buyer);")
    conn.commit()
    cur.close()
