# bdjuno

`bdjuno` is the data layer of a blockchain explorer. It stores validator
information in an SQLite database, models the rows of the explorer's
tables as value types, and serves read-only "actions" over HTTP that ask
a chain backend for balances, rewards, withdraw addresses and
commissions.

## What is inside

- **`bdjuno.database`** – the `Database` class (an SQLite connection,
  in memory by default, usable as a context manager). `create_schema()`
  creates the tables. It stores accounts (`save_account`), validators
  (`save_validator_data`, `save_validators_data`), descriptions
  (`save_validator_description`), commissions
  (`save_validator_commission`), voting powers
  (`save_validators_voting_powers`), statuses
  (`save_validators_statuses`), double-sign evidence
  (`save_double_sign_evidence`) and the list of enabled modules
  (`insert_enable_modules`). It reads validators back with
  `get_validator`, `get_validators`,
  `get_validator_by_self_delegate_address`,
  `get_validator_consensus_address` and
  `get_validator_operator_address`. Validator info, descriptions,
  commissions, voting powers and statuses are only overwritten by data
  whose height is greater than or equal to the stored one. Description
  fields set to `"[do-not-modify]"` keep their stored value. Failures
  raise `DatabaseError`; over-long description fields raise `ValueError`.
  The input types `Description`, `ValidatorDescription`,
  `ValidatorCommission`, `ValidatorVotingPower`, `ValidatorStatus`,
  `DoubleSignVote` and `DoubleSignEvidence` live in the same module.
- **`bdjuno.coins`** – `Coin` (integer amount) and `DecCoin` (decimal
  amount, 18 fractional digits), and their stored forms `DbCoin`,
  `DbCoins`, `DbDecCoin` and `DbDecCoins`, which write and read the
  `(denom,amount)` composite text. Helpers: `format_dec`, `to_string`,
  `to_null_string` (blank strings become `None`) and `remove_empty`.
- **`bdjuno.rows_chain`, `bdjuno.rows_staking`, `bdjuno.rows_gov`,
  `bdjuno.rows_misc`** – frozen dataclasses for the table rows: genesis,
  consensus, average block time, blocks, supply, community pool,
  inflation, mint, staking pool and staking parameters, accounts and
  modules (`module_rows`); validators, validator info, descriptions,
  commissions, voting powers, statuses and double-sign votes and
  evidence; governance parameters, proposals, tally results, votes,
  deposits and snapshots; fee allowances, tokens, token prices, signing
  info and slashing parameters. Rows compare by value.
  `ValidatorData.max_rate_value()` and `max_change_rate_value()` read
  the stored rates as whole numbers.
- **`bdjuno.batching`** – `split_accounts(accounts, params_number)`
  splits a list into batches that keep a statement under 65535 bound
  parameters.
- **`bdjuno.actions_config`** – `ActionsConfig`, `default_config()`
  (port 3000, no node) and `parse_config()`, which reads the `actions`
  section of a YAML document and returns `None` when it is absent.
- **`bdjuno.sources`** – the abstract `BankSource` and
  `DistributionSource` classes a chain backend implements,
  `DelegationDelegatorReward`, and `Sources`, which groups one of each.
- **`bdjuno.action_models`** – the request `Payload` (with
  `Payload.from_json`, `address()` and `pagination()`), the response
  dataclasses, `convert_coins`, `convert_dec_coins` and
  `to_json_object`.
- **`bdjuno.handlers`** – `ActionContext` and the handlers
  `account_balance_handler`, `delegation_reward_handler`,
  `delegator_withdraw_address_handler` and
  `validator_commission_amount_handler`. When a payload carries no
  height (or height 0), `ActionContext.get_height` uses the latest one;
  the withdraw-address and commission handlers always use the latest
  height. Failures raise `ActionError`.
- **`bdjuno.worker`** – `ActionsWorker`. `register_handler` maps a path
  to a handler; `handle(path, body)` returns status, content type and
  body: 200 with the JSON result, 400 with `{"message": ...}` when the
  handler fails, 500 when the payload is not valid JSON, 404 for an
  unknown path. `make_server(port)` builds a threading HTTP server and
  `start(port)` serves until the process is stopped.
- **`bdjuno.metrics`** – `ActionMetrics`, counting successful and failed
  actions per path and recording response times in a `Histogram`
  (buckets 0.5, 1, 2, 3, 4 and 5 seconds).

## Examples

Storing and reading a validator:

```python
from bdjuno.database import Database
from bdjuno.rows_staking import ValidatorData

with Database() as db:
    db.create_schema()
    db.save_validator_data(ValidatorData(
        cons_address="cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl",
        val_address="cosmosvaloper1rcp29q3hpd246n6qak7jluqep4v006cdsc2kkl",
        cons_pub_key="cosmosvalconspub1zcjduepq7mft6gfls57a0a42d7uhx656cckhfvtrlmw744jv4q0mvlv0dypskehfk8",
        self_delegate_address="cosmos1z4hfrxvlgl4s8u4n5ngjcw8kdqrcv43599amxs",
        max_rate="1",
        max_change_rate="2",
        height=1,
    ))
    validator = db.get_validator("cosmosvaloper1rcp29q3hpd246n6qak7jluqep4v006cdsc2kkl")
    print(validator.max_rate)  # 1.000000000000000000
```

Reading the actions configuration:

```python
from bdjuno.actions_config import parse_config

config = parse_config("actions:\n  port: 8080\n")
print(config.port)  # 8080
```

Serving actions:

```python
from bdjuno.handlers import ActionContext, account_balance_handler
from bdjuno.sources import Sources
from bdjuno.worker import ActionsWorker

context = ActionContext(
    latest_height=lambda: my_node.latest_height(),
    sources=Sources(bank=my_bank_source, distribution=my_distribution_source),
)
worker = ActionsWorker(context)
worker.register_handler("/account_balance", account_balance_handler)
worker.start(config.port)
```

Here `my_bank_source` and `my_distribution_source` are your own
subclasses of `BankSource` and `DistributionSource`, and `latest_height`
is any callable returning the chain's latest height.

## What this package does not do

- It contains no chain client: no implementation of `BankSource` or
  `DistributionSource` and nothing that talks to a node. You supply them.
- It has no staking, delegation, unbonding or redelegation actions; the
  response types for them exist in `bdjuno.action_models`, but no
  handler fills them.
- It does not index blocks or transactions, and it stores only the
  validator tables, accounts and modules; the other row types are
  models only.
- It installs no command; the actions server is started from Python
  with `ActionsWorker.start`.

## Requirements

Python 3.10 or later and PyYAML. The test suite uses pytest
(`pip install .[test]`).