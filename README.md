# temporalzone

This library models two modules of a proof-of-stake chain.

- **record** keeps a *delegation history* for each delegator. A history is a
  list of balances, and each balance is stamped with a day. Adding stake makes
  the list grow. Removing stake shrinks it, starting with the newest entry.
- **compound** holds the types, parameters, genesis validation and
  transaction messages for per-delegator auto-compounding settings.

The library has no runtime dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Addresses

`temporalzone.address` contains a bech32 codec and helpers for account
addresses:

- `bech32_encode(hrp, data)`
- `bech32_decode(bech)`
- `acc_address_from_bech32(address, prefix)`
- `acc_address_to_bech32(raw, prefix)`

The prefix defaults to `"cosmos"`.

```python
from temporalzone.address import acc_address_from_bech32, acc_address_to_bech32

raw = bytes(20)
text = acc_address_to_bech32(raw, "temporal")
assert acc_address_from_bech32(text, "temporal") == raw
```

The decoder raises `AddressError`, a `ValueError`, in these cases:

- malformed strings
- a bad checksum
- a wrong prefix
- an empty or over-long address

## Coins

`temporalzone.coin.Coin` is an immutable pair of `denom` and `amount`. A
negative amount raises `ValueError`, and so does a non-integer amount.
`Coin.add` sums two coins of the same denomination and raises `ValueError`
when the denominations differ. `to_dict()` and `from_dict()` convert a coin
to and from a mapping, with the amount written as a string.

## Compound settings

`temporalzone.compound_types` defines these classes:

- `Params`, with fields `number_of_compounds_per_block`,
  `minimum_compound_frequency` and `compound_module_enabled`. The defaults
  are 100, 100 and `True`.
- `ValidatorSetting`
- `CompoundSetting`
- `PreviousCompound`
- `GenesisState`

`default_genesis()` returns a valid, empty starting state.
`GenesisState.validate()` raises `GenesisError` when a delegator appears
twice in either list. `Params.validate()` raises `ParamsError` when a count
or frequency is below 1 or when a value has the wrong type.

`compound_setting_key(delegator)` and `previous_compound_key(delegator)`
return the store keys, which are the delegator followed by `/`.

`temporalzone.compound_messages` provides three messages:

- `MsgCreateCompoundSetting`
- `MsgUpdateCompoundSetting`
- `MsgDeleteCompoundSetting`

Each message has these methods:

- `route()` returns `"compound"`.
- `msg_type()` returns the message type, for example `"create_compound_setting"`.
- `validate_basic()` raises `InvalidAddressError` unless the delegator is a
  valid `cosmos`-prefixed address.
- `get_signers()` returns the delegator's raw address bytes.
- `get_sign_bytes()` returns compact JSON with the keys sorted.

## Delegation history

`temporalzone.record_types` defines `DelegationTimestamp`,
`DelegationHistory`, `GenesisState` and an empty `Params`. Each of the first
three can be converted to and from plain dictionaries with `to_dict()` and
`from_dict()`. Timestamps are kept in UTC.

`temporalzone.record_keeper.Keeper` stores `DelegationHistory` records as
JSON in the `KVStore` that its `Context` holds. A `StakingKeeper` supplies
validators, delegations and the bond denomination.

```python
from datetime import datetime, timezone
from temporalzone.record_keeper import Context, Keeper, StakingKeeper

staking = StakingKeeper(bond_denom="utprl")
keeper = Keeper(staking)
ctx = Context(block_time=datetime(2024, 1, 1, 12, tzinfo=timezone.utc))

ts = keeper.new_delegation_timestamp(ctx, 1000)   # dated 2024-01-01 00:00 UTC
```

`Keeper` has these methods:

- `set_delegation_history`, `get_delegation_history`,
  `remove_delegation_history` and `get_all_delegation_history` store and
  read records. `get_delegation_history` returns `None` when there is no
  record.
- `add_delegation_timestamp(ctx, history, amount)` adds `amount` to the
  entry for the block's day. If there is no entry for that day, it appends
  a new one.
- `remove_delegation_timestamps(history, difference)` takes
  `abs(difference)` off the newest entries first. Entries that are used up
  are dropped.
- `prune_delegation_history(history)` returns a copy without the
  zero-balance entries.
- `check_delegation_history_records(ctx, delegator)` brings the stored
  record in line with the delegator's current total stake.
  `keeper.hooks().after_delegation_modified(ctx, delegator, validator)`
  calls this method.

### Queries

Queries take the following request objects from `temporalzone.record_keeper`:

- `keeper.delegation_history(ctx, QueryGetDelegationHistoryRequest(address))`
- `keeper.delegation_history_all(ctx, QueryAllDelegationHistoryRequest(pagination))`
- `keeper.params(ctx, QueryParamsRequest())`

A failed query raises `QueryError`, which carries a `StatusCode`:

- `INVALID_ARGUMENT` when the request is `None`
- `NOT_FOUND` when there is no record for the address
- `INTERNAL` when the pagination request is bad

Pagination uses `temporalzone.store.paginate` with a `PageRequest`. A page
is selected by `offset` or by `key`, but not by both. A `limit` of 0 means
100 entries, and in that case the total is counted. The function returns a
`PageResponse` with `next_key` and `total`.

## Genesis

`temporalzone.record_genesis` provides `init_genesis(ctx, keeper, state)` and
`export_genesis(ctx, keeper)`.

`RecordModule` reads and writes the genesis state as JSON through these
methods:

- `default_genesis()`
- `validate_genesis(raw)`, which raises `GenesisError`
- `init_genesis(ctx, raw)`
- `export_genesis(ctx)`

It also provides `name()`, `consensus_version()` and `end_block(ctx)`.

## What is not included

- There is no command-line tool and no network or query server. Everything
  is called as a library.
- All storage is in memory, in `KVStore` objects held by a `Context`. Nothing
  is written to disk.
- The compound module has only types, parameters, genesis validation and
  messages. It has no keeper that stores settings or runs compounding.