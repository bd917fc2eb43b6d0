from sqlalchemy import BigInteger, Integer

# Winner ids: BigInteger on server databases, Integer on SQLite so the
# primary key stays an autoincrementing ROWID alias.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")
