# Both scripts take a window [ARGV[1], ARGV[1] + ARGV[2]] of the ranking
# sorted set and return {member, rank, stored_score} rows in store order.
# Stored scores are negated, so "better" means a lower stored score.

# KEYS[1] ranking set, KEYS[2] distinct score set
DENSE_RANK = """
local start = tonumber(ARGV[1])
local window = redis.call('ZRANGE', KEYS[1], start, start + tonumber(ARGV[2]), 'WITHSCORES')
local rows = {}
local previous = nil
local rank = 0
for i = 1, #window, 2 do
    local zscore = window[i + 1]
    if zscore ~= previous then
        rank = redis.call('ZCOUNT', KEYS[2], '-inf', '(' .. zscore) + 1
        previous = zscore
    end
    table.insert(rows, {window[i], rank, zscore})
end
return rows
"""

# KEYS[1] ranking set, ARGV[3] 3 = standard, 4 = modified competition
COMPETITION_RANK = """
local start = tonumber(ARGV[1])
local modified = tonumber(ARGV[3]) == 4
local window = redis.call('ZRANGE', KEYS[1], start, start + tonumber(ARGV[2]), 'WITHSCORES')
local rows = {}
local previous = nil
local position = start
local rank = 0
for i = 1, #window, 2 do
    local zscore = window[i + 1]
    if zscore ~= previous then
        if modified then
            -- position of the last member of this tie group
            rank = redis.call('ZCOUNT', KEYS[1], '-inf', zscore)
        elseif previous == nil then
            -- the tie group may begin before the window
            rank = redis.call('ZCOUNT', KEYS[1], '-inf', '(' .. zscore) + 1
        else
            rank = position + 1
        end
        previous = zscore
    end
    table.insert(rows, {window[i], rank, zscore})
    position = position + 1
end
return rows
"""
